"""
Tests for the numeric envelope decoder.
"""

import pytest

from slurm_rest.slurm import envelope


@pytest.mark.parametrize("number", [0, 1, 42, -1, -255, 2**40])
def test_decode_set_envelope(number):
    assert envelope.decode({'number': number, 'set': True, 'infinite': False}) == number


@pytest.mark.parametrize("number", [0, 5, -3])
def test_decode_unset_envelope_is_absent(number):
    assert envelope.decode({'number': number, 'set': False, 'infinite': False}) is None


@pytest.mark.parametrize("value", [
    None,
    7,
    "7",
    [],
    {},
    {'number': 3},
    {'set': True},
    {'number': "3", 'set': True},
    {'number': 3, 'set': "true"},
    {'number': True, 'set': True},
    {'number': 1.5, 'set': True},
])
def test_decode_malformed_is_absent(value):
    assert envelope.decode(value) is None


def test_decode_ignores_infinite_flag():
    assert envelope.decode({'number': 0, 'set': True, 'infinite': True}) == 0
    assert envelope.is_infinite({'number': 0, 'set': False, 'infinite': True})
    assert not envelope.is_infinite({'number': 0, 'set': True, 'infinite': False})
    assert not envelope.is_infinite(None)


def test_decode_time_returns_float():
    value = envelope.decode_time({'number': 1700000000, 'set': True, 'infinite': False})
    assert isinstance(value, float)
    assert value == 1700000000.0
    assert envelope.decode_time({'number': 0, 'set': False, 'infinite': False}) is None


def test_encode():
    assert envelope.encode(30) == {'number': 30, 'set': True, 'infinite': False}
    assert envelope.decode(envelope.encode(30)) == 30
