"""
Error taxonomy and the result wrapper returned by the REST client.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class SlurmRestError(Exception):
    """Base class for every error the client reports."""


class TransportError(SlurmRestError):
    """Connection failure or non-2xx HTTP status."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        if self.status is not None:
            return f"HTTP {self.status}: {self.body}"
        return super().__str__()


class ParseError(SlurmRestError):
    """Response was unreadable or lacked a required field."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body

    def __str__(self) -> str:
        message = super().__str__()
        if self.body:
            return f"{message}: {self.body}"
        return message


class NotFoundError(SlurmRestError):
    """A lookup by job id matched no records."""

    def __init__(self, job_id: str, body: str = ""):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id
        self.body = body


class TokenError(SlurmRestError):
    """Token issuing command failed or printed no token."""

    def __init__(self, message: str, output: str = "", returncode: Optional[int] = None):
        super().__init__(message)
        self.output = output
        self.returncode = returncode

    def __str__(self) -> str:
        message = super().__str__()
        if self.output:
            return f"{message}: {self.output.strip()}"
        return message


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a client call: either a value or one SlurmRestError.

    Client operations never raise; callers branch on ``ok`` or use
    ``unwrap()`` to get exception semantics back.
    """
    value: Optional[T] = None
    error: Optional[SlurmRestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the carried error if the call failed."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: T = None) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, error: SlurmRestError) -> 'Result[T]':
        return cls(error=error)
