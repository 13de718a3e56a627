"""
SLURM job states and the canonical job record.
"""

from typing import Dict, FrozenSet, Optional, Union
from dataclasses import dataclass
from enum import Enum


class JobState(Enum):
    """SLURM job states."""
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUSPENDED = "SUSPENDED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"
    NODE_FAIL = "NODE_FAIL"
    PREEMPTED = "PREEMPTED"
    BOOT_FAIL = "BOOT_FAIL"
    DEADLINE = "DEADLINE"
    OUT_OF_MEMORY = "OUT_OF_MEMORY"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def is_final(self) -> bool:
        return self in FINAL_STATES


@dataclass(frozen=True)
class UnknownState:
    """
    A state token the client does not recognize.

    Behaves like a JobState member for display purposes (``name``/``value``)
    but keeps the scheduler's original string.
    """
    raw: str

    name = "UNKNOWN"

    @property
    def value(self) -> str:
        return self.raw

    @property
    def is_terminal(self) -> bool:
        return False

    @property
    def is_final(self) -> bool:
        return False


AnyJobState = Union[JobState, UnknownState]


# Loop-exit states used by pollers
TERMINAL_STATES: FrozenSet[JobState] = frozenset({
    JobState.COMPLETED,
    JobState.FAILED,
    JobState.CANCELLED,
    JobState.TIMEOUT,
})

# Every outcome the scheduler will not transition out of
FINAL_STATES: FrozenSet[JobState] = TERMINAL_STATES | frozenset({
    JobState.NODE_FAIL,
    JobState.PREEMPTED,
    JobState.BOOT_FAIL,
    JobState.DEADLINE,
    JobState.OUT_OF_MEMORY,
})

_STATE_TOKENS: Dict[str, JobState] = {
    'PENDING': JobState.PENDING,
    'PD': JobState.PENDING,
    'RUNNING': JobState.RUNNING,
    'R': JobState.RUNNING,
    'SUSPENDED': JobState.SUSPENDED,
    'S': JobState.SUSPENDED,
    'COMPLETED': JobState.COMPLETED,
    'CD': JobState.COMPLETED,
    'CANCELLED': JobState.CANCELLED,
    'CA': JobState.CANCELLED,
    'CANCELLED+': JobState.CANCELLED,
    'FAILED': JobState.FAILED,
    'F': JobState.FAILED,
    'TIMEOUT': JobState.TIMEOUT,
    'TO': JobState.TIMEOUT,
    'NODE_FAIL': JobState.NODE_FAIL,
    'NF': JobState.NODE_FAIL,
    'PREEMPTED': JobState.PREEMPTED,
    'PR': JobState.PREEMPTED,
    'BOOT_FAIL': JobState.BOOT_FAIL,
    'BF': JobState.BOOT_FAIL,
    'DEADLINE': JobState.DEADLINE,
    'DL': JobState.DEADLINE,
    'OUT_OF_MEMORY': JobState.OUT_OF_MEMORY,
    'OOM': JobState.OUT_OF_MEMORY,
}


def classify(token: str) -> AnyJobState:
    """
    Parse a SLURM state token (long form or squeue abbreviation).

    Never fails: unrecognized tokens come back as ``UnknownState(token)``.
    """
    state = _STATE_TOKENS.get(token)
    if state is None:
        return UnknownState(token)
    return state


@dataclass(frozen=True)
class JobInfo:
    """Information about a SLURM job, independent of the endpoint it came from."""
    job_id: str
    job_state: str
    name: str
    user_name: str
    exit_code: Optional[int] = None
    signal: Optional[int] = None
    submit_time: Optional[float] = None
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @property
    def state(self) -> AnyJobState:
        """Classified view of ``job_state``."""
        return classify(self.job_state)

    @property
    def wait_time(self) -> Optional[float]:
        """Seconds spent queued, if the job has started."""
        if self.submit_time is None or self.start_time is None:
            return None
        return self.start_time - self.submit_time

    @property
    def run_time(self) -> Optional[float]:
        """Seconds between start and end, if the job has finished."""
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time
