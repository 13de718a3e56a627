"""
HTTP transport for slurmrestd.

The client only needs "send a request, get status and body back"; anything
implementing ``Transport.send`` can stand in for ``RequestsTransport``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests

from .errors import TransportError


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    def send(self,
             method: str,
             url: str,
             headers: Dict[str, str],
             payload: Optional[Dict[str, Any]] = None) -> HttpResponse:
        ...


class RequestsTransport:
    """
    Transport backed by a ``requests.Session``.

    Sessions are not guaranteed thread-safe; use one transport per thread.
    """

    def __init__(self,
                 timeout: float = 30.0,
                 session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            timeout: Seconds before a request is abandoned
            session: Session to reuse (default: a new one)
            logger: Logger instance
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    def send(self,
             method: str,
             url: str,
             headers: Dict[str, str],
             payload: Optional[Dict[str, Any]] = None) -> HttpResponse:
        """
        Perform one request. No retries.

        Raises:
            TransportError: If the request could not be completed
        """
        data = json.dumps(payload) if payload is not None else None
        try:
            resp = self.session.request(
                method=method.upper(),
                url=url,
                headers=headers,
                data=data,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Request failed: {method.upper()} {url}: {e}")
            raise TransportError(f"Request failed: {e}") from e

        return HttpResponse(status=resp.status_code, body=resp.text)

    def close(self) -> None:
        self.session.close()
