"""
SLURM job monitoring over the REST API with progress display.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Collection, Optional

from tqdm.auto import tqdm

from .client import SlurmRestClient
from .errors import SlurmRestError
from .job import FINAL_STATES, AnyJobState, JobInfo, JobState


@dataclass(frozen=True)
class PollResult:
    """Outcome of monitoring a job."""
    job_info: Optional[JobInfo]
    attempts: int
    finished: bool
    error: Optional[SlurmRestError] = None


class SlurmMonitor:
    """Poll a job until it reaches a stop state or the attempt cap."""

    def __init__(self,
                 client: SlurmRestClient,
                 check_interval: float = 2.0,
                 max_polls: int = 20,
                 stop_states: Collection[JobState] = FINAL_STATES,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize SLURM monitor.

        Args:
            client: REST client used for status queries
            check_interval: Seconds between status checks
            max_polls: Give up after this many status checks
            stop_states: States that end monitoring (pass TERMINAL_STATES
                for the narrower completed/failed/cancelled/timeout set)
            sleep: Sleep function (replaceable in tests)
        """
        if max_polls < 1:
            raise ValueError(f"max_polls must be at least 1, got {max_polls}")
        self.client = client
        self.check_interval = check_interval
        self.max_polls = max_polls
        self.stop_states = frozenset(stop_states)
        self.sleep = sleep

    def is_done(self, state: AnyJobState) -> bool:
        return state in self.stop_states

    def monitor_job(self,
                    job_id: str,
                    job_name: Optional[str] = None,
                    show_progress: bool = True,
                    callback: Optional[Callable[[JobInfo], None]] = None) -> PollResult:
        """
        Monitor a single job until completion.

        Args:
            job_id: SLURM job ID
            job_name: Job name for display
            show_progress: Show tqdm progress bar
            callback: Function to call on each update with JobInfo

        Returns:
            PollResult with the last JobInfo seen
        """
        if show_progress:
            pbar = tqdm(total=1,
                        desc=f"{job_name or job_id}",
                        bar_format='{desc}: {elapsed} [{postfix}]')
        else:
            pbar = None

        job_info = None
        attempts = 0

        try:
            while attempts < self.max_polls:
                attempts += 1
                result = self.client.get_job(job_id)
                if not result.ok:
                    return PollResult(job_info=job_info, attempts=attempts,
                                      finished=False, error=result.error)

                job_info = result.value
                state = job_info.state

                if pbar:
                    if state == JobState.PENDING:
                        pbar.set_postfix_str("Pending in queue")
                    elif state == JobState.RUNNING:
                        status = "Running"
                        if job_info.start_time is not None:
                            elapsed = datetime.now() - datetime.fromtimestamp(job_info.start_time)
                            status += f" - {self.format_time(elapsed)}"
                        pbar.set_postfix_str(status)
                    elif self.is_done(state):
                        pbar.n = 1
                        pbar.refresh()
                        status_str = f"{state.value}"
                        if job_info.exit_code:
                            status_str += f" (exit: {job_info.exit_code})"
                        pbar.set_postfix_str(status_str)
                    else:
                        pbar.set_postfix_str(state.value)

                if callback:
                    callback(job_info)

                if self.is_done(state):
                    return PollResult(job_info=job_info, attempts=attempts, finished=True)

                if attempts < self.max_polls:
                    self.sleep(self.check_interval)

        finally:
            if pbar:
                pbar.close()

        self.client.logger.warning(f"Giving up on job {job_id} after {attempts} polls")
        return PollResult(job_info=job_info, attempts=attempts, finished=False)

    @staticmethod
    def format_time(td: timedelta) -> str:
        """Format timedelta for display."""
        total_seconds = max(int(td.total_seconds()), 0)
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {seconds}s"
        elif minutes > 0:
            return f"{minutes}m {seconds}s"
        else:
            return f"{seconds}s"

    def print_job_summary(self, job_info: JobInfo):
        """Print a nice summary of job information."""
        print(f"\n{'='*50}")
        print(f"Job ID: {job_info.job_id}")
        if job_info.name:
            print(f"Job Name: {job_info.name}")
        print(f"User: {job_info.user_name}")
        print(f"State: {job_info.job_state}")

        if job_info.submit_time is not None:
            print(f"Submit Time: {datetime.fromtimestamp(job_info.submit_time)}")
        if job_info.start_time is not None:
            print(f"Start Time: {datetime.fromtimestamp(job_info.start_time)}")
        if job_info.run_time is not None:
            print(f"Elapsed: {self.format_time(timedelta(seconds=job_info.run_time))}")

        if job_info.exit_code is not None:
            print(f"Exit Code: {job_info.exit_code}")
        if job_info.signal:
            print(f"Signal: {job_info.signal}")

        print(f"{'='*50}\n")
