"""
Debug utilities for diagnosing slurmrestd connectivity, auth and job issues.
"""

import argparse
import json
import os
import shutil
import sys
from typing import Dict, Any, Optional, Sequence

from ..slurm.auth import JWTAuth, TokenProvider, generate_token
from ..slurm.client import SlurmRestClient
from ..slurm.config import RestConfig
from ..slurm.errors import NotFoundError, TokenError, TransportError
from ..slurm.job import JobState
from ..slurm.monitor import SlurmMonitor
from ..slurm.submit import JobSubmit

PROBE_SCRIPT = """#!/bin/bash
hostname
date
sleep 5
echo 'Job completed'
"""


class SlurmRestDebugger:
    """Debug utilities for slurmrestd client issues."""

    def __init__(self,
                 client: SlurmRestClient,
                 token_provider: Optional[TokenProvider] = None,
                 monitor: Optional[SlurmMonitor] = None):
        """Initialize with a SlurmRestClient instance."""
        self.client = client
        self.token_provider = token_provider
        self.monitor = monitor or SlurmMonitor(client)

    @property
    def username(self) -> Optional[str]:
        auth = self.client.config.auth
        if isinstance(auth, JWTAuth):
            return auth.username
        return os.environ.get('USER')

    def check_environment(self) -> Dict[str, Any]:
        """Check client configuration and local SLURM tooling."""
        config = self.client.config
        checks = {
            'base_url': config.base_url,
            'api_version': config.api_version,
            'auth_mode': 'jwt' if isinstance(config.auth, JWTAuth) else 'local',
            'scontrol_path': shutil.which('scontrol'),
            'token_ok': None,
            'issues': []
        }

        if checks['scontrol_path'] is None:
            checks['issues'].append("scontrol not found in PATH (needed to issue tokens)")

        if not config.base_url.startswith(('http://', 'https://')):
            checks['issues'].append(f"Base URL is not HTTP(S): {config.base_url}")

        if checks['scontrol_path'] or self.token_provider is not None:
            username = self.username
            if username:
                result = generate_token(username, lifespan=60, provider=self.token_provider)
                checks['token_ok'] = result.ok
                if not result.ok:
                    checks['issues'].append(f"Token generation failed: {result.error}")

        return checks

    def check_connectivity(self) -> Dict[str, Any]:
        """Make one live-endpoint request and report what came back."""
        status = {
            'reachable': False,
            'http_status': None,
            'n_jobs': None,
            'error': None,
        }

        result = self.client.get_jobs()
        if result.ok:
            status['reachable'] = True
            status['n_jobs'] = len(result.value)
            return status

        error = result.error
        status['error'] = str(error)
        if isinstance(error, TransportError) and error.status is not None:
            # The daemon answered; the request was refused
            status['reachable'] = True
            status['http_status'] = error.status
        return status

    def diagnose_job(self, job_id: str) -> Dict[str, Any]:
        """
        Find a job on the live endpoint, falling back to the accounting
        database for jobs the scheduler has already purged.
        """
        diagnostics = {
            'job_id': job_id,
            'source': None,
            'job': None,
            'issues': []
        }

        result = self.client.get_job(job_id)
        if result.ok:
            diagnostics['source'] = 'live'
            diagnostics['job'] = result.value
            return diagnostics

        if not isinstance(result.error, NotFoundError):
            diagnostics['issues'].append(f"Live lookup failed: {result.error}")

        users = [self.username] if self.username else None
        history = self.client.list_historical(users)
        if not history.ok:
            diagnostics['issues'].append(f"History lookup failed: {history.error}")
            return diagnostics

        for job in history.value:
            if job.job_id == str(job_id):
                diagnostics['source'] = 'history'
                diagnostics['job'] = job
                return diagnostics

        diagnostics['issues'].append("Job not found in queue or history")
        return diagnostics

    def test_submission(self, dry_run: bool = True, wait: bool = True) -> Dict[str, Any]:
        """Test job submission with a simple probe script."""
        print("Testing SLURM REST submission...")

        spec = JobSubmit(
            name="test-hostname",
            script=PROBE_SCRIPT,
            nodes="1",
            tasks=1,
            environment=[('PATH', '/usr/bin:/bin')],
            working_directory="/tmp",
            stdout_path="/tmp/slurm-rest-test-%j.out",
        )

        if dry_run:
            print("\nDry run - submission payload:")
            print("-" * 60)
            print(json.dumps(spec.to_payload(), indent=2))
            print("-" * 60)
            return {'status': 'dry_run', 'payload': spec.to_payload()}

        result = self.client.submit_job(spec)
        if not result.ok:
            print(f"Submission failed: {result.error}")
            return {'status': 'failed', 'error': str(result.error)}

        job_id = result.value
        print(f"Successfully submitted test job: {job_id}")
        response = {'status': 'submitted', 'job_id': job_id}

        if wait:
            outcome = self.monitor.monitor_job(job_id, job_name=spec.name)
            response['finished'] = outcome.finished
            response['attempts'] = outcome.attempts
            if outcome.error is not None:
                response['status'] = 'monitor_failed'
                response['error'] = str(outcome.error)
            elif outcome.job_info is not None:
                response['state'] = outcome.job_info.job_state
                response['exit_code'] = outcome.job_info.exit_code
                if outcome.job_info.state == JobState.COMPLETED:
                    response['status'] = 'completed'

        return response

    def test_rejection(self, constraint: str = "riscv64") -> Dict[str, Any]:
        """Submit a job with an unsatisfiable constraint; it should be refused."""
        spec = JobSubmit(
            name="test-bad-feature",
            script="#!/bin/bash\necho 'This should fail'\n",
            nodes="1",
            tasks=1,
            constraints=constraint,
        )

        result = self.client.submit_job(spec)
        if not result.ok:
            print(f"Job correctly rejected: {result.error}")
            return {'status': 'rejected', 'error': str(result.error)}

        print(f"Job unexpectedly accepted with ID: {result.value}")
        self.client.cancel_job(result.value)
        return {'status': 'accepted', 'job_id': result.value}

    def run_diagnostics(self, job_id: Optional[str] = None) -> None:
        """Run full diagnostics and print report."""
        print("=" * 70)
        print("SLURM REST DIAGNOSTICS")
        print("=" * 70)

        # Environment check
        print("\n1. ENVIRONMENT CHECK")
        print("-" * 30)
        env_check = self.check_environment()

        print(f"Base URL: {env_check['base_url']}")
        print(f"API version: {env_check['api_version']}")
        print(f"Auth mode: {env_check['auth_mode']}")
        if env_check['scontrol_path']:
            print(f"scontrol path: {env_check['scontrol_path']}")
        if env_check['token_ok'] is not None:
            print(f"Token generation: {'OK' if env_check['token_ok'] else 'FAILED'}")

        if env_check['issues']:
            print("\nIssues found:")
            for issue in env_check['issues']:
                print(f"  - {issue}")

        # Connectivity
        print("\n2. CONNECTIVITY")
        print("-" * 30)
        conn = self.check_connectivity()

        print(f"Reachable: {conn['reachable']}")
        if conn['n_jobs'] is not None:
            print(f"Visible jobs: {conn['n_jobs']}")
        if conn['http_status'] is not None:
            print(f"HTTP status: {conn['http_status']}")
        if conn['error']:
            print(f"Error: {conn['error']}")

        # Job-specific diagnostics
        if job_id:
            print(f"\n3. JOB {job_id} DIAGNOSTICS")
            print("-" * 30)
            job_check = self.diagnose_job(job_id)

            if job_check['job'] is not None:
                print(f"Found in: {job_check['source']}")
                self.monitor.print_job_summary(job_check['job'])
            for issue in job_check['issues']:
                print(f"  - {issue}")

        print("\n" + "=" * 70)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for command-line execution."""
    from ..cli import setup_logging

    parser = argparse.ArgumentParser(description="Diagnose slurmrestd client setup")
    parser.add_argument('--url', help='slurmrestd base URL (default: $SLURM_REST_URL)')
    parser.add_argument('--user', help='Issue a JWT for this user with scontrol')
    parser.add_argument('--job-id', help='Also diagnose this job')
    parser.add_argument('--submit', action='store_true',
                        help='Submit a probe job and wait for it')
    parser.add_argument('--check-rejection', action='store_true',
                        help='Check that an unsatisfiable job is refused')
    parser.add_argument('--log-level', default='WARNING')

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    config = RestConfig.from_env()
    base_url = args.url or config.base_url
    if args.user:
        try:
            config = RestConfig.with_token(base_url, args.user, api_version=config.api_version)
        except TokenError as e:
            print(f"Failed to generate token: {e}", file=sys.stderr)
            return 1
    else:
        config = RestConfig.create(base_url, config.auth, config.api_version)

    debugger = SlurmRestDebugger(SlurmRestClient(config))
    debugger.run_diagnostics(job_id=args.job_id)

    if args.check_rejection:
        debugger.test_rejection()
    if args.submit:
        outcome = debugger.test_submission(dry_run=False)
        return 0 if outcome['status'] == 'completed' else 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
