"""
Tests for normalizing live and accounting job objects.
"""

import json
import logging

import pytest

from slurm_rest.slurm.errors import ParseError
from slurm_rest.slurm.job import JobState, classify
from slurm_rest.slurm.parser import Schema, parse_body, parse_job, parse_jobs

from .fakes import envelope, historical_job, live_job


def test_live_running_job_without_exit_or_end():
    record = parse_job(live_job(job_id=42, state="RUNNING"), Schema.LIVE)

    assert record.job_id == "42"
    assert record.job_state == "RUNNING"
    assert record.name == "test-job"
    assert record.user_name == "alice"
    assert record.exit_code is None
    assert record.signal is None
    assert record.end_time is None
    assert record.submit_time == 1700000000.0
    assert record.start_time == 1700000060.0


def test_live_job_with_exit_code_and_signal():
    raw = live_job(
        state="FAILED",
        exit_code={
            'return_code': envelope(42),
            'signal': {'id': envelope(9), 'name': 'KILL'},
        },
        end_time=envelope(1700000100),
    )
    record = parse_job(raw, Schema.LIVE)

    assert record.exit_code == 42
    assert record.signal == 9
    assert record.end_time == 1700000100.0
    assert record.state is JobState.FAILED


def test_historical_completed_job_keeps_zero_exit_code():
    record = parse_job(historical_job(job_id=99, state="COMPLETED"), Schema.HISTORICAL)

    assert record.job_id == "99"
    assert record.job_state == "COMPLETED"
    assert record.exit_code == 0
    assert record.signal is None
    assert record.user_name == "alice"
    assert record.submit_time == 1700000000.0
    assert record.start_time == 1700000030.0
    assert record.end_time == 1700000330.0


def test_historical_user_field_is_renamed():
    raw = historical_job(user="bob")
    assert parse_job(raw, Schema.HISTORICAL).user_name == "bob"


def test_optional_fields_degrade_individually():
    raw = live_job(submit_time="garbage", start_time=None,
                   end_time={'number': 5, 'set': False, 'infinite': False},
                   exit_code={'return_code': "zero"})
    record = parse_job(raw, Schema.LIVE)

    assert record.submit_time is None
    assert record.start_time is None
    assert record.end_time is None
    assert record.exit_code is None
    assert record.job_state == "RUNNING"


def test_only_first_state_entry_is_used():
    raw = live_job(job_state=["COMPLETING", "RUNNING"])
    assert parse_job(raw, Schema.LIVE).job_state == "COMPLETING"


@pytest.mark.parametrize("mutate", [
    lambda job: job.pop('job_id'),
    lambda job: job.update(job_id="1234"),
    lambda job: job.update(job_id=True),
    lambda job: job.pop('name'),
    lambda job: job.update(name=None),
    lambda job: job.pop('user_name'),
    lambda job: job.update(job_state=[]),
    lambda job: job.update(job_state="RUNNING"),
    lambda job: job.update(job_state=[7]),
])
def test_live_required_fields(mutate):
    raw = live_job()
    mutate(raw)
    with pytest.raises(ParseError) as excinfo:
        parse_job(raw, Schema.LIVE)
    assert json.loads(excinfo.value.body) == raw


def test_schemas_are_not_interchangeable():
    with pytest.raises(ParseError):
        parse_job(historical_job(), Schema.LIVE)
    with pytest.raises(ParseError):
        parse_job(live_job(), Schema.HISTORICAL)


def test_non_object_entry_is_parse_error():
    with pytest.raises(ParseError):
        parse_job(["not", "a", "job"], Schema.LIVE)


@pytest.mark.parametrize("schema, raw", [
    (Schema.LIVE, live_job(state="CANCELLED+")),
    (Schema.LIVE, live_job(state="PD")),
    (Schema.LIVE, live_job(state="REQUEUE_HOLD")),
    (Schema.HISTORICAL, historical_job(state="OUT_OF_MEMORY")),
    (Schema.HISTORICAL, historical_job(state="weird state ")),
])
def test_extracted_token_classifies_like_the_raw_token(schema, raw):
    token = raw['job_state'][0] if schema is Schema.LIVE else raw['state']['current'][0]
    record = parse_job(raw, schema)
    assert record.job_state == token
    assert record.state == classify(token)


def test_parse_jobs_drops_malformed_entries(caplog):
    bad = live_job(job_id=2)
    del bad['name']
    payload = {'jobs': [live_job(job_id=1), bad]}

    with caplog.at_level(logging.WARNING):
        records = parse_jobs(payload, Schema.LIVE)

    assert [r.job_id for r in records] == ["1"]
    assert "Dropping unparseable live job entry" in caplog.text


def test_parse_jobs_empty_list():
    assert parse_jobs({'jobs': []}, Schema.HISTORICAL) == []


@pytest.mark.parametrize("payload", [{}, {'jobs': None}, {'jobs': {}}])
def test_parse_jobs_requires_jobs_array(payload):
    with pytest.raises(ParseError):
        parse_jobs(payload, Schema.LIVE)


@pytest.mark.parametrize("body", ["", "not json", "[1, 2]", "null", '{"jobs": [1,'])
def test_parse_body_rejects_non_objects(body):
    with pytest.raises(ParseError) as excinfo:
        parse_body(body)
    assert excinfo.value.body == body


def test_parse_body_rejects_deeply_nested_json():
    body = '{"jobs": ' + '[' * 100000
    with pytest.raises(ParseError) as excinfo:
        parse_body(body)
    assert excinfo.value.body == body


def test_parse_body_accepts_object():
    assert parse_body('{"jobs": []}') == {'jobs': []}
