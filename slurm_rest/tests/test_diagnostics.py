"""
Tests for the diagnostics helper.
"""

from slurm_rest.diagnostics import SlurmRestDebugger
from slurm_rest.slurm.auth import JWTAuth
from slurm_rest.slurm.client import SlurmRestClient
from slurm_rest.slurm.config import RestConfig
from slurm_rest.slurm.errors import TokenError
from slurm_rest.slurm.monitor import SlurmMonitor

from .fakes import FakeTransport, StubTokenProvider, historical_job, jobs_body, live_job


def make_debugger(transport, provider=None):
    config = RestConfig.create("http://slurm:6820", JWTAuth(username="alice", token="t"))
    client = SlurmRestClient(config, transport=transport)
    monitor = SlurmMonitor(client, sleep=lambda s: None)
    return SlurmRestDebugger(client, token_provider=provider or StubTokenProvider(),
                             monitor=monitor)


def test_check_environment_reports_token_failure():
    provider = StubTokenProvider(error=TokenError("scontrol token failed", output="denied"))
    checks = make_debugger(FakeTransport(), provider).check_environment()

    assert checks['auth_mode'] == 'jwt'
    assert checks['token_ok'] is False
    assert any("Token generation failed" in issue for issue in checks['issues'])
    assert provider.calls == [("alice", 60)]


def test_check_connectivity():
    transport = FakeTransport().queue(200, jobs_body(live_job()))
    assert make_debugger(transport).check_connectivity() == {
        'reachable': True, 'http_status': None, 'n_jobs': 1, 'error': None
    }

    refused = FakeTransport().queue(401, "Authentication failure")
    status = make_debugger(refused).check_connectivity()
    assert status['reachable'] is True
    assert status['http_status'] == 401

    down = FakeTransport().fail()
    assert make_debugger(down).check_connectivity()['reachable'] is False


def test_diagnose_job_falls_back_to_history():
    transport = FakeTransport()
    transport.queue(200, jobs_body())
    transport.queue(200, jobs_body(historical_job(job_id=10), historical_job(job_id=11)))

    result = make_debugger(transport).diagnose_job("11")

    assert result['source'] == 'history'
    assert result['job'].job_id == "11"
    assert result['issues'] == []
    assert transport.last['url'].endswith("/slurmdb/v0.0.40/jobs?users=alice")


def test_diagnose_job_not_anywhere():
    transport = FakeTransport().queue(200, jobs_body()).queue(200, jobs_body())
    result = make_debugger(transport).diagnose_job("11")
    assert result['job'] is None
    assert "Job not found in queue or history" in result['issues']


def test_submission_dry_run_sends_nothing():
    transport = FakeTransport()
    result = make_debugger(transport).test_submission(dry_run=True)

    assert result['status'] == 'dry_run'
    assert result['payload']['job']['environment'] == ["PATH=/usr/bin:/bin"]
    assert transport.requests == []


def test_submission_completes():
    transport = FakeTransport()
    transport.queue(200, {'job_id': 900})
    transport.queue(200, jobs_body(live_job(job_id=900, state="COMPLETED")))

    result = make_debugger(transport).test_submission(dry_run=False)

    assert result['status'] == 'completed'
    assert result['job_id'] == "900"
    assert result['finished'] is True


def test_rejection():
    transport = FakeTransport().queue(500, '{"errors": [{"error": "Invalid feature"}]}')
    result = make_debugger(transport).test_rejection()

    assert result['status'] == 'rejected'
    assert transport.last['payload']['job']['constraints'] == "riscv64"
