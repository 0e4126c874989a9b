"""
Client configuration.

A `ClientConfig` fixes the node to talk to and the timeouts of every
request. It can be built directly or loaded from the environment:

- `BEACON_API_URL`: base URL of the beacon node.
- `BEACON_API_TIMEOUT`: request timeout in seconds.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlsplit

DEFAULT_BASE_URL = "http://localhost:5052"
"""Conventional Beacon API address of a local node."""

DEFAULT_USER_AGENT = "beacon-api-client"

ENV_BASE_URL = "BEACON_API_URL"
ENV_TIMEOUT = "BEACON_API_TIMEOUT"


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Configuration for `BeaconApiClient`."""

    base_url: str = DEFAULT_BASE_URL
    """Base URL of the node. A trailing slash is ignored."""

    request_timeout: float = 30.0
    """Read and write timeout of a REST request, in seconds."""

    connect_timeout: float = 10.0
    """Timeout for establishing a connection, in seconds."""

    user_agent: str = DEFAULT_USER_AGENT
    """`User-Agent` sent with every request."""

    headers: Mapping[str, str] = field(default_factory=dict)
    """Extra headers sent with every request (e.g. authentication)."""

    def __post_init__(self) -> None:
        parts = urlsplit(self.base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.connect_timeout <= 0:
            raise ValueError(f"connect_timeout must be positive, got {self.connect_timeout}")

    @property
    def root_url(self) -> str:
        """The base URL without trailing slashes."""
        return self.base_url.rstrip("/")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """
        Build a configuration from environment variables.

        Unset variables keep their defaults.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        if base_url := env.get(ENV_BASE_URL):
            values["base_url"] = base_url

        if timeout := env.get(ENV_TIMEOUT):
            try:
                values["request_timeout"] = float(timeout)
            except ValueError as exc:
                raise ValueError(f"{ENV_TIMEOUT} must be a number, got {timeout!r}") from exc

        return cls(**values)  # type: ignore[arg-type]
