"""
Client configuration dataclass for slurmrestd.
"""

import os
from typing import Optional, Union
from dataclasses import dataclass, field

from .auth import DEFAULT_LIFESPAN, JWTAuth, LocalAuth, ScontrolTokenProvider, TokenProvider

DEFAULT_BASE_URL = "http://localhost:6820"
DEFAULT_API_VERSION = "v0.0.40"


@dataclass(frozen=True)
class RestConfig:
    """Immutable configuration shared by every call of a client."""
    base_url: str = DEFAULT_BASE_URL
    auth: Union[JWTAuth, LocalAuth] = field(default_factory=LocalAuth)
    api_version: str = DEFAULT_API_VERSION

    def __post_init__(self):
        object.__setattr__(self, 'base_url', self.base_url.rstrip('/'))

    def endpoint(self, prefix: str, path: str) -> str:
        """
        Build a full URL.

        Args:
            prefix: ``slurm`` (live scheduler) or ``slurmdb`` (accounting)
            path: Path below the version segment, starting with ``/``
        """
        return f"{self.base_url}/{prefix}/{self.api_version}{path}"

    @classmethod
    def create(cls,
               base_url: str,
               auth: Optional[Union[JWTAuth, LocalAuth]] = None,
               api_version: str = DEFAULT_API_VERSION) -> 'RestConfig':
        """Create a configuration, defaulting to local credentials."""
        return cls(base_url=base_url, auth=auth or LocalAuth(), api_version=api_version)

    @classmethod
    def from_env(cls) -> 'RestConfig':
        """
        Read configuration from the environment.

        Uses SLURM_REST_URL, SLURM_REST_API_VERSION, SLURM_JWT and
        SLURM_USER (falling back to USER). Without SLURM_JWT the client
        relies on local credentials.
        """
        base_url = os.environ.get('SLURM_REST_URL', DEFAULT_BASE_URL)
        api_version = os.environ.get('SLURM_REST_API_VERSION', DEFAULT_API_VERSION)
        token = os.environ.get('SLURM_JWT')

        if token:
            username = os.environ.get('SLURM_USER') or os.environ.get('USER', 'unknown')
            auth = JWTAuth(username=username, token=token)
        else:
            auth = LocalAuth()

        return cls(base_url=base_url, auth=auth, api_version=api_version)

    @classmethod
    def with_token(cls,
                   base_url: str,
                   username: str,
                   provider: Optional[TokenProvider] = None,
                   lifespan: int = DEFAULT_LIFESPAN,
                   api_version: str = DEFAULT_API_VERSION) -> 'RestConfig':
        """
        Issue a fresh JWT and build a configuration using it.

        Raises:
            TokenError: If no token could be issued
        """
        provider = provider or ScontrolTokenProvider()
        token = provider.issue(username, lifespan)
        return cls(base_url=base_url,
                   auth=JWTAuth(username=username, token=token),
                   api_version=api_version)
