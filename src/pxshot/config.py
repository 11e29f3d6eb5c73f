"""Configuration objects for the Pxshot client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Union

import httpx

from .errors import PxshotError

DEFAULT_BASE_URL = "https://api.pxshot.com"
DEFAULT_TIMEOUT = 60.0
DEFAULT_RETRIES = 2
DEFAULT_RETRY_DELAY = 1.0


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    user_agent: str = "pxshot-python/0.1.0"
    headers: Dict[str, str] = field(default_factory=dict)
    transport: Optional[httpx.AsyncBaseTransport] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        api_key = os.environ.get("PXSHOT_API_KEY", "")
        if not api_key and "api_key" not in overrides:
            raise PxshotError("PXSHOT_API_KEY must be set")

        values: Dict[str, Any] = {
            "api_key": api_key,
            "base_url": os.environ.get("PXSHOT_BASE_URL", DEFAULT_BASE_URL),
            "timeout": float(os.environ.get("PXSHOT_TIMEOUT", DEFAULT_TIMEOUT)),
            "retries": int(os.environ.get("PXSHOT_RETRIES", DEFAULT_RETRIES)),
            "retry_delay": float(os.environ.get("PXSHOT_RETRY_DELAY", DEFAULT_RETRY_DELAY)),
        }
        values.update(overrides)
        return cls(**values)


ConfigInput = Union[str, ClientConfig, Mapping[str, Any]]


def resolve_config(api_key_or_config: ConfigInput) -> ClientConfig:
    """Normalize constructor input into a validated, immutable config.

    A bare string is taken as the API key with every other field defaulted.
    """

    if isinstance(api_key_or_config, ClientConfig):
        config = api_key_or_config
    elif isinstance(api_key_or_config, str):
        config = ClientConfig(api_key=api_key_or_config)
    elif isinstance(api_key_or_config, Mapping):
        known = {f.name for f in fields(ClientConfig)}
        unknown = sorted(set(api_key_or_config) - known)
        if unknown:
            raise PxshotError(f"Unknown config option(s): {', '.join(unknown)}")
        if not api_key_or_config.get("api_key"):
            raise PxshotError("API key is required")
        config = ClientConfig(**api_key_or_config)
    else:
        raise PxshotError(f"Expected an API key or ClientConfig, got {type(api_key_or_config).__name__}")

    if not config.api_key:
        raise PxshotError("API key is required")
    if config.timeout <= 0:
        raise PxshotError("timeout must be positive")
    if config.retries < 0:
        raise PxshotError("retries must be >= 0")
    if config.retry_delay < 0:
        raise PxshotError("retry_delay must be >= 0")

    base_url = config.base_url.rstrip("/")
    if base_url != config.base_url:
        config = replace(config, base_url=base_url)
    return config


def resolve_transport(config: ClientConfig) -> httpx.AsyncBaseTransport:
    """Return the caller's transport override, else the ambient httpx transport."""

    transport = config.transport
    if transport is None:
        return httpx.AsyncHTTPTransport()
    if not isinstance(transport, httpx.AsyncBaseTransport):
        raise PxshotError(
            f"no HTTP transport available; supply one explicitly (got {type(transport).__name__}, "
            "expected an httpx.AsyncBaseTransport)"
        )
    return transport


__all__ = [
    "ClientConfig",
    "ConfigInput",
    "DEFAULT_BASE_URL",
    "DEFAULT_RETRIES",
    "DEFAULT_RETRY_DELAY",
    "DEFAULT_TIMEOUT",
    "resolve_config",
    "resolve_transport",
]
