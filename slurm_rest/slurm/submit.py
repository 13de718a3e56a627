"""
SLURM job submission dataclass for the REST API.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union
from dataclasses import dataclass

from . import envelope

EnvironmentPairs = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class JobSubmit:
    """Specification of a job to submit through slurmrestd."""
    name: str
    script: str
    account: Optional[str] = None
    partition: Optional[str] = None
    nodes: Optional[str] = None  # Node count or range, e.g. "1" or "2-4"
    tasks: Optional[int] = None
    cpus_per_task: Optional[int] = None
    memory_mb: Optional[int] = None
    time_limit: Optional[int] = None  # Minutes
    environment: Union[EnvironmentPairs, Sequence[Tuple[str, str]], Mapping[str, str]] = ()
    constraints: Optional[str] = None
    working_directory: Optional[str] = None
    stdout_path: Optional[str] = None  # Path template, e.g. "/tmp/slurm-%j.out"
    stderr_path: Optional[str] = None
    array: Optional[str] = None  # Array spec, e.g. "0-9%2"

    def __post_init__(self):
        """Freeze the environment into a tuple of (key, value) pairs."""
        env = self.environment
        if isinstance(env, Mapping):
            pairs = tuple((str(k), str(v)) for k, v in env.items())
        else:
            pairs = tuple((str(k), str(v)) for k, v in env)
        object.__setattr__(self, 'environment', pairs)

    def to_payload(self) -> Dict[str, Any]:
        """
        Convert to the JSON body of ``POST /slurm/{version}/job/submit``.

        Unset optional fields are left out rather than sent as null.
        """
        job: Dict[str, Any] = {'name': self.name}

        if self.account is not None:
            job['account'] = self.account
        if self.partition is not None:
            job['partition'] = self.partition
        if self.nodes is not None:
            job['nodes'] = self.nodes
        if self.tasks is not None:
            job['tasks'] = self.tasks
        if self.cpus_per_task is not None:
            job['cpus_per_task'] = self.cpus_per_task
        if self.memory_mb is not None:
            job['memory_per_node'] = self.memory_mb
        if self.time_limit is not None:
            job['time_limit'] = envelope.encode(self.time_limit)
        if self.environment:
            job['environment'] = [f"{key}={value}" for key, value in self.environment]
        if self.constraints is not None:
            job['constraints'] = self.constraints
        if self.working_directory is not None:
            job['current_working_directory'] = self.working_directory
        if self.stdout_path is not None:
            job['standard_output'] = self.stdout_path
        if self.stderr_path is not None:
            job['standard_error'] = self.stderr_path
        if self.array is not None:
            job['array'] = self.array

        return {'script': self.script, 'job': job}

    @classmethod
    def from_script_file(cls, script_path: str, name: Optional[str] = None,
                         **kwargs) -> 'JobSubmit':
        """
        Create a submission from a batch script on disk.

        Args:
            script_path: Path to the script
            name: Job name (default: script file name without suffix)
            **kwargs: Additional JobSubmit fields
        """
        path = Path(script_path)
        with open(path, 'r') as f:
            script = f.read()
        return cls(name=name or path.stem, script=script, **kwargs)

    @classmethod
    def for_array_job(cls,
                      name: str,
                      script: str,
                      array_size: int,
                      array_throttle: Optional[int] = None,
                      **kwargs) -> 'JobSubmit':
        """
        Create an array job with tasks 0 to array_size-1.

        Args:
            name: Name of the job
            script: Job script content
            array_size: Number of array tasks
            array_throttle: Maximum number of tasks running at once
            **kwargs: Additional JobSubmit fields
        """
        if array_size < 1:
            raise ValueError(f"array_size must be positive, got {array_size}")

        array = f"0-{array_size - 1}"
        if array_throttle:
            array += f"%{array_throttle}"

        defaults = {
            'tasks': 1,
            'nodes': "1",
        }
        defaults.update(kwargs)
        return cls(name=name, script=script, array=array, **defaults)
