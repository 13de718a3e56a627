"""
Normalization of slurmrestd job objects into JobInfo records.

The live scheduler endpoint (``/slurm/``) and the accounting endpoint
(``/slurmdb/``) describe the same job with different JSON shapes. Each
schema is a table of field paths; both feed the same record constructor.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from . import envelope
from .errors import ParseError
from .job import JobInfo

logger = logging.getLogger(__name__)

Path = Tuple[str, ...]


class Schema(Enum):
    """Which endpoint a job object came from."""
    LIVE = "live"
    HISTORICAL = "historical"


@dataclass(frozen=True)
class FieldPaths:
    """Where each JobInfo field lives in a raw job object."""
    state: Path
    user: Path
    submit_time: Path
    start_time: Path
    end_time: Path
    exit_code: Path = ('exit_code', 'return_code')
    signal: Path = ('exit_code', 'signal', 'id')


FIELD_PATHS: Dict[Schema, FieldPaths] = {
    Schema.LIVE: FieldPaths(
        state=('job_state',),
        user=('user_name',),
        submit_time=('submit_time',),
        start_time=('start_time',),
        end_time=('end_time',),
    ),
    Schema.HISTORICAL: FieldPaths(
        state=('state', 'current'),
        user=('user',),
        submit_time=('time', 'submission'),
        start_time=('time', 'start'),
        end_time=('time', 'end'),
    ),
}


def _lookup(obj: Any, path: Path) -> Any:
    """Follow a key path through nested dicts; None if any step is missing."""
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _raw_text(raw: Any) -> str:
    try:
        return json.dumps(raw)
    except (TypeError, ValueError):
        return repr(raw)


def _require_str(raw: Dict[str, Any], path: Path, what: str) -> str:
    value = _lookup(raw, path)
    if not isinstance(value, str):
        raise ParseError(f"Missing or invalid {what} ({'.'.join(path)})", _raw_text(raw))
    return value


def parse_job(raw: Any, schema: Schema) -> JobInfo:
    """
    Build a JobInfo from one raw job object.

    Args:
        raw: Decoded JSON object for a single job
        schema: Endpoint the object came from

    Returns:
        Normalized JobInfo

    Raises:
        ParseError: If job_id, state, name or user is missing or mistyped
    """
    if not isinstance(raw, dict):
        raise ParseError("Job entry is not an object", _raw_text(raw))

    paths = FIELD_PATHS[schema]

    job_id = raw.get('job_id')
    if not isinstance(job_id, int) or isinstance(job_id, bool):
        raise ParseError("Missing or invalid job_id", _raw_text(raw))

    # State is a one-element list like ["PENDING"]; only the first entry matters
    states = _lookup(raw, paths.state)
    if not isinstance(states, list) or not states or not isinstance(states[0], str):
        raise ParseError(f"Missing or invalid job state ({'.'.join(paths.state)})", _raw_text(raw))

    return JobInfo(
        job_id=str(job_id),
        job_state=states[0],
        name=_require_str(raw, ('name',), "job name"),
        user_name=_require_str(raw, paths.user, "user name"),
        exit_code=envelope.decode(_lookup(raw, paths.exit_code)),
        signal=envelope.decode(_lookup(raw, paths.signal)),
        submit_time=envelope.decode_time(_lookup(raw, paths.submit_time)),
        start_time=envelope.decode_time(_lookup(raw, paths.start_time)),
        end_time=envelope.decode_time(_lookup(raw, paths.end_time)),
    )


def parse_body(body: str) -> Dict[str, Any]:
    """Decode a response body that must be a JSON object."""
    try:
        payload = json.loads(body)
    except (TypeError, ValueError, RecursionError) as e:
        raise ParseError(f"Malformed JSON ({e})", body) from e
    if not isinstance(payload, dict):
        raise ParseError("Response is not a JSON object", body)
    return payload


def job_entries(payload: Dict[str, Any], body: Optional[str] = None) -> List[Any]:
    """Return the ``jobs`` array of a response payload."""
    jobs = payload.get('jobs')
    if not isinstance(jobs, list):
        raise ParseError("Response has no jobs array", body if body is not None else _raw_text(payload))
    return jobs


def parse_jobs(payload: Dict[str, Any], schema: Schema,
               log: Optional[logging.Logger] = None) -> List[JobInfo]:
    """
    Normalize every entry of a ``jobs`` array.

    Malformed entries are logged and dropped; the rest are kept.

    Raises:
        ParseError: If the payload has no ``jobs`` array at all
    """
    log = log or logger
    records = []
    for entry in job_entries(payload):
        try:
            records.append(parse_job(entry, schema))
        except ParseError as e:
            log.warning(f"Dropping unparseable {schema.value} job entry: {e}")
    return records
