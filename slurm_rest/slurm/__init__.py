"""
SLURM REST API components: job records, normalization, transport and client.
"""

from .config import RestConfig
from .client import SlurmRestClient
from .monitor import SlurmMonitor, PollResult
from .job import JobState, JobInfo, UnknownState, classify, TERMINAL_STATES, FINAL_STATES
from .submit import JobSubmit
from .auth import JWTAuth, LocalAuth, ScontrolTokenProvider, generate_token
from .errors import (
    Result, SlurmRestError, TransportError, ParseError, NotFoundError, TokenError
)

__all__ = [
    "RestConfig", "SlurmRestClient", "SlurmMonitor", "PollResult",
    "JobState", "JobInfo", "UnknownState", "classify", "TERMINAL_STATES", "FINAL_STATES",
    "JobSubmit", "JWTAuth", "LocalAuth", "ScontrolTokenProvider", "generate_token",
    "Result", "SlurmRestError", "TransportError", "ParseError", "NotFoundError", "TokenError",
]
