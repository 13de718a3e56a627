"""
Authentication for slurmrestd requests.

Two modes are supported:

- ``JWTAuth``: sends ``X-SLURM-USER-NAME`` / ``X-SLURM-USER-TOKEN`` with
  every request. Tokens come from ``scontrol token``.
- ``LocalAuth``: sends nothing and relies on the transport running as an
  authorized local user (e.g. slurmrestd behind a unix socket).
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from .errors import Result, TokenError

logger = logging.getLogger(__name__)

DEFAULT_LIFESPAN = 3600
TOKEN_PREFIX = "SLURM_JWT="


class Auth(Protocol):
    def headers(self) -> Dict[str, str]:
        ...


@dataclass(frozen=True)
class JWTAuth:
    """Bearer-token authentication."""
    username: str
    token: str

    def headers(self) -> Dict[str, str]:
        return {
            'X-SLURM-USER-NAME': self.username,
            'X-SLURM-USER-TOKEN': self.token,
        }

    def __repr__(self) -> str:
        return f"JWTAuth(username={self.username!r}, token=<redacted>)"


@dataclass(frozen=True)
class LocalAuth:
    """Local credential mode: no extra headers."""

    def headers(self) -> Dict[str, str]:
        return {}


class TokenProvider(Protocol):
    def issue(self, username: str, lifespan: int = DEFAULT_LIFESPAN) -> str:
        ...


def parse_token_output(output: str) -> Optional[str]:
    """Extract the token from ``scontrol token`` output."""
    for line in output.splitlines():
        line = line.strip()
        if line.startswith(TOKEN_PREFIX):
            return line[len(TOKEN_PREFIX):].strip()
    return None


class ScontrolTokenProvider:
    """Issue JWTs by running ``scontrol token``."""

    def __init__(self,
                 command: str = "scontrol",
                 timeout: float = 30.0,
                 runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            command: scontrol executable
            timeout: Seconds to wait for the command
            runner: Replacement for subprocess.run (used by tests)
            logger: Logger instance
        """
        self.command = command
        self.timeout = timeout
        self.runner = runner or subprocess.run
        self.logger = logger or logging.getLogger(__name__)

    def issue(self, username: str, lifespan: int = DEFAULT_LIFESPAN) -> str:
        """
        Request a token for ``username`` valid for ``lifespan`` seconds.

        Raises:
            TokenError: If the command fails or prints no SLURM_JWT line
        """
        cmd = [self.command, 'token', f'username={username}', f'lifespan={lifespan}']
        self.logger.info(f"Generating JWT token for user {username}")

        try:
            result = self.runner(cmd, capture_output=True, text=True, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as e:
            self.logger.error(f"Failed to run {self.command}: {e}")
            raise TokenError(f"Failed to run {self.command}: {e}") from e

        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            self.logger.error(f"scontrol token failed: {output.strip()}")
            raise TokenError("scontrol token failed", output=output, returncode=result.returncode)

        token = parse_token_output(result.stdout or "")
        if not token:
            self.logger.error("Failed to parse token from scontrol output")
            raise TokenError("Failed to parse token from scontrol output",
                             output=output, returncode=result.returncode)

        self.logger.info("Token generated successfully")
        return token


def generate_token(username: str,
                   lifespan: int = DEFAULT_LIFESPAN,
                   provider: Optional[TokenProvider] = None) -> Result[str]:
    """Issue a token, reporting failure as a Result instead of raising."""
    provider = provider or ScontrolTokenProvider()
    try:
        return Result.success(provider.issue(username, lifespan))
    except TokenError as e:
        return Result.failure(e)
