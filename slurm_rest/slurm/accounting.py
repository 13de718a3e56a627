"""
Aggregate statistics over job records, typically an accounting listing.
"""

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from .job import JobInfo


def _stats(values: List[float]) -> Optional[Dict[str, float]]:
    if not values:
        return None
    arr = np.asarray(values, dtype=float)
    return {
        'count': int(arr.size),
        'mean': float(np.mean(arr)),
        'median': float(np.median(arr)),
        'p90': float(np.percentile(arr, 90)),
        'max': float(np.max(arr)),
    }


def summarize_jobs(jobs: Iterable[JobInfo]) -> Dict[str, Any]:
    """
    Summarize a set of jobs.

    Returns:
        Dictionary with job count, counts per state name, the non-zero exit
        codes seen, and queue-wait / run-time statistics in seconds (None
        when no job has the timestamps needed)
    """
    jobs = list(jobs)

    state_counts = Counter(job.state.name for job in jobs)
    failed_exit_codes = Counter(job.exit_code for job in jobs
                                if job.exit_code is not None and job.exit_code != 0)

    wait_times = [job.wait_time for job in jobs if job.wait_time is not None]
    run_times = [job.run_time for job in jobs if job.run_time is not None]

    return {
        'n_jobs': len(jobs),
        'state_counts': dict(state_counts),
        'failed_exit_codes': dict(failed_exit_codes),
        'wait_time': _stats(wait_times),
        'run_time': _stats(run_times),
    }
