"""
Tests for the bounded polling loop.
"""

from datetime import timedelta

import pytest

from slurm_rest.slurm.client import SlurmRestClient
from slurm_rest.slurm.config import RestConfig
from slurm_rest.slurm.errors import TransportError
from slurm_rest.slurm.job import TERMINAL_STATES, JobState
from slurm_rest.slurm.monitor import SlurmMonitor

from .fakes import FakeTransport, envelope, jobs_body, live_job


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def make_monitor(transport, **kwargs):
    client = SlurmRestClient(RestConfig.create("http://slurm:6820"), transport=transport)
    sleep = RecordingSleep()
    kwargs.setdefault('check_interval', 2.0)
    return SlurmMonitor(client, sleep=sleep, **kwargs), sleep


def test_stops_on_terminal_state():
    transport = FakeTransport()
    transport.queue(200, jobs_body(live_job(state="PENDING")))
    transport.queue(200, jobs_body(live_job(state="RUNNING")))
    transport.queue(200, jobs_body(live_job(
        state="FAILED", exit_code={'return_code': envelope(42)})))
    monitor, sleep = make_monitor(transport)

    outcome = monitor.monitor_job("1234", show_progress=False)

    assert outcome.finished
    assert outcome.attempts == 3
    assert outcome.error is None
    assert outcome.job_info.state is JobState.FAILED
    assert outcome.job_info.exit_code == 42
    assert sleep.calls == [2.0, 2.0]


def test_gives_up_after_max_polls():
    transport = FakeTransport()
    for _ in range(5):
        transport.queue(200, jobs_body(live_job(state="RUNNING")))
    monitor, sleep = make_monitor(transport, max_polls=5)

    outcome = monitor.monitor_job("1234", show_progress=False)

    assert not outcome.finished
    assert outcome.attempts == 5
    assert outcome.job_info.state is JobState.RUNNING
    assert len(transport.requests) == 5
    assert len(sleep.calls) == 4


def test_default_stops_on_node_fail():
    transport = FakeTransport().queue(200, jobs_body(live_job(state="NODE_FAIL")))
    monitor, _ = make_monitor(transport)

    outcome = monitor.monitor_job("1234", show_progress=False)
    assert outcome.finished
    assert outcome.attempts == 1


def test_narrow_stop_states_keep_polling_on_node_fail():
    transport = FakeTransport()
    for _ in range(3):
        transport.queue(200, jobs_body(live_job(state="NODE_FAIL")))
    monitor, _ = make_monitor(transport, max_polls=3, stop_states=TERMINAL_STATES)

    outcome = monitor.monitor_job("1234", show_progress=False)
    assert not outcome.finished
    assert outcome.attempts == 3


def test_unknown_state_keeps_polling():
    transport = FakeTransport()
    transport.queue(200, jobs_body(live_job(state="REQUEUED")))
    transport.queue(200, jobs_body(live_job(state="CD")))
    monitor, _ = make_monitor(transport)

    outcome = monitor.monitor_job("1234", show_progress=False)
    assert outcome.finished
    assert outcome.attempts == 2


def test_client_error_stops_monitoring():
    transport = FakeTransport()
    transport.queue(200, jobs_body(live_job(state="RUNNING")))
    transport.queue(500, "internal error")
    monitor, _ = make_monitor(transport)

    outcome = monitor.monitor_job("1234", show_progress=False)

    assert not outcome.finished
    assert outcome.attempts == 2
    assert isinstance(outcome.error, TransportError)
    assert outcome.job_info.job_state == "RUNNING"


def test_callback_sees_every_update():
    transport = FakeTransport()
    transport.queue(200, jobs_body(live_job(state="RUNNING")))
    transport.queue(200, jobs_body(live_job(state="COMPLETED")))
    monitor, _ = make_monitor(transport)
    seen = []

    monitor.monitor_job("1234", show_progress=False, callback=lambda info: seen.append(info.job_state))
    assert seen == ["RUNNING", "COMPLETED"]


def test_progress_bar_path():
    transport = FakeTransport()
    transport.queue(200, jobs_body(live_job(state="PENDING")))
    transport.queue(200, jobs_body(live_job(state="RUNNING")))
    transport.queue(200, jobs_body(live_job(state="COMPLETED")))
    monitor, _ = make_monitor(transport)

    outcome = monitor.monitor_job("1234", job_name="probe", show_progress=True)
    assert outcome.finished


def test_max_polls_must_be_positive():
    with pytest.raises(ValueError):
        make_monitor(FakeTransport(), max_polls=0)


def test_format_time():
    assert SlurmMonitor.format_time(timedelta(seconds=5)) == "5s"
    assert SlurmMonitor.format_time(timedelta(minutes=2, seconds=3)) == "2m 3s"
    assert SlurmMonitor.format_time(timedelta(hours=1, minutes=0, seconds=9)) == "1h 0m 9s"
