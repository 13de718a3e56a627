"""
Decoding of slurmrestd's numeric envelope.

slurmrestd wraps optional integers (exit codes, signals, timestamps, time
limits) as ``{"number": N, "set": bool, "infinite": bool}``. Only ``set``
decides whether ``number`` is meaningful.
"""

from typing import Any, Dict, Optional


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid number here
    return isinstance(value, int) and not isinstance(value, bool)


def decode(envelope: Any) -> Optional[int]:
    """
    Decode an envelope to its number, or None.

    Missing or malformed envelopes decode to None instead of raising, so a
    single bad field never blocks the rest of a record.
    """
    if not isinstance(envelope, dict):
        return None
    if envelope.get('set') is not True:
        return None
    number = envelope.get('number')
    if not _is_int(number):
        return None
    return number


def decode_time(envelope: Any) -> Optional[float]:
    """Decode an epoch-seconds envelope as a float."""
    number = decode(envelope)
    if number is None:
        return None
    return float(number)


def is_infinite(envelope: Any) -> bool:
    """Whether the envelope marks an unbounded value."""
    return isinstance(envelope, dict) and envelope.get('infinite') is True


def encode(value: int) -> Dict[str, Any]:
    """Wrap a concrete integer for submission."""
    return {'number': value, 'set': True, 'infinite': False}
