"""
Client for the slurmrestd job-control API.

Every public operation issues exactly one request and returns a Result;
transport and parse failures come back as tagged errors instead of
exceptions.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import RestConfig
from .errors import NotFoundError, ParseError, Result, SlurmRestError, TransportError
from .job import JobInfo
from .parser import Schema, job_entries, parse_body, parse_job, parse_jobs
from .submit import JobSubmit
from .transport import RequestsTransport, Transport

LIVE_PREFIX = "slurm"
HISTORICAL_PREFIX = "slurmdb"


class SlurmRestClient:
    """Submit, inspect and cancel SLURM jobs over HTTP."""

    def __init__(self,
                 config: RestConfig,
                 transport: Optional[Transport] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            config: Base URL, credentials and API version
            transport: HTTP transport (default: RequestsTransport)
            logger: Logger instance
        """
        self.config = config
        self.transport = transport or RequestsTransport()
        self.logger = logger or logging.getLogger(__name__)

    def _headers(self) -> Dict[str, str]:
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        headers.update(self.config.auth.headers())
        return headers

    def _request(self,
                 method: str,
                 prefix: str,
                 path: str,
                 payload: Optional[Dict[str, Any]] = None) -> str:
        """
        Send an authenticated request and return the body of a 2xx response.

        Raises:
            TransportError: On connection failure or non-2xx status
        """
        url = self.config.endpoint(prefix, path)
        self.logger.debug(f"{method} {url}")

        response = self.transport.send(method, url, self._headers(), payload)

        self.logger.debug(f"Response status: {response.status}")
        if not response.is_success:
            self.logger.warning(f"{method} {url} failed with HTTP {response.status}: {response.body}")
            raise TransportError(f"HTTP {response.status}", status=response.status, body=response.body)

        self.logger.debug(f"Response body: {response.body}")
        return response.body

    @staticmethod
    def _query(path: str, key: str, values: Optional[Sequence[str]]) -> str:
        if isinstance(values, str):
            values = [values]
        if values:
            return f"{path}?{key}={','.join(str(v) for v in values)}"
        return path

    def submit_job(self, spec: JobSubmit) -> Result[str]:
        """
        Submit a job.

        Returns:
            Result holding the scheduler-assigned job id as a string
        """
        self.logger.info(f"Submitting job: {spec.name}")
        try:
            body = self._request('POST', LIVE_PREFIX, '/job/submit', spec.to_payload())
            job_id = parse_body(body).get('job_id')
            if not isinstance(job_id, int) or isinstance(job_id, bool):
                raise ParseError("Submit response has no integer job_id", body)
        except SlurmRestError as e:
            self.logger.error(f"Failed to submit job {spec.name}: {e}")
            return Result.failure(e)

        self.logger.info(f"Job submitted: {job_id}")
        return Result.success(str(job_id))

    def get_job(self, job_id: str) -> Result[JobInfo]:
        """
        Get information about a single job from the live scheduler.

        An empty ``jobs`` array is reported as NotFoundError.
        """
        self.logger.debug(f"Getting job info: {job_id}")
        try:
            body = self._request('GET', LIVE_PREFIX, f'/job/{job_id}')
            jobs = job_entries(parse_body(body), body)
            if not jobs:
                raise NotFoundError(str(job_id), body)
            # slurmrestd should return one entry per id; take the first
            try:
                return Result.success(parse_job(jobs[0], Schema.LIVE))
            except ParseError as e:
                raise ParseError(e.args[0], body) from e
        except SlurmRestError as e:
            self.logger.error(f"Failed to get job {job_id}: {e}")
            return Result.failure(e)

    def get_jobs(self, job_ids: Optional[Sequence[str]] = None) -> Result[List[JobInfo]]:
        """
        Get information about several jobs from the live scheduler.

        Args:
            job_ids: Restrict to these ids (default: all visible jobs)

        Returns:
            Result holding every entry that could be parsed
        """
        self.logger.debug("Getting jobs info")
        path = self._query('/jobs', 'job_id', job_ids)
        try:
            body = self._request('GET', LIVE_PREFIX, path)
            return Result.success(parse_jobs(parse_body(body), Schema.LIVE, self.logger))
        except SlurmRestError as e:
            self.logger.error(f"Failed to get jobs: {e}")
            return Result.failure(e)

    def cancel_job(self, job_id: str) -> Result[None]:
        """Cancel a job. Success is judged by HTTP status alone."""
        self.logger.info(f"Cancelling job: {job_id}")
        try:
            self._request('DELETE', LIVE_PREFIX, f'/job/{job_id}')
        except SlurmRestError as e:
            self.logger.error(f"Failed to cancel job {job_id}: {e}")
            return Result.failure(e)

        self.logger.info(f"Job cancelled: {job_id}")
        return Result.success(None)

    def list_historical(self, users: Optional[Sequence[str]] = None) -> Result[List[JobInfo]]:
        """
        List jobs from the accounting database, including finished ones.

        Args:
            users: Restrict to jobs owned by these users
        """
        self.logger.debug("Getting jobs from slurmdb")
        path = self._query('/jobs', 'users', users)
        try:
            body = self._request('GET', HISTORICAL_PREFIX, path)
            return Result.success(parse_jobs(parse_body(body), Schema.HISTORICAL, self.logger))
        except SlurmRestError as e:
            self.logger.error(f"Failed to get slurmdb jobs: {e}")
            return Result.failure(e)
