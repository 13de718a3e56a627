"""
SLURM REST - A Python client for the slurmrestd job-control API.
"""

__version__ = "0.1.0"

# Import main classes for easy access
from .slurm.config import RestConfig
from .slurm.client import SlurmRestClient
from .slurm.monitor import SlurmMonitor
from .slurm.job import JobState, JobInfo, classify
from .slurm.submit import JobSubmit
from .slurm.auth import JWTAuth, LocalAuth, generate_token
from .slurm.errors import (
    Result, SlurmRestError, TransportError, ParseError, NotFoundError, TokenError
)

__all__ = [
    "RestConfig",
    "SlurmRestClient",
    "SlurmMonitor",
    "JobState",
    "JobInfo",
    "classify",
    "JobSubmit",
    "JWTAuth",
    "LocalAuth",
    "generate_token",
    "Result",
    "SlurmRestError",
    "TransportError",
    "ParseError",
    "NotFoundError",
    "TokenError",
]
