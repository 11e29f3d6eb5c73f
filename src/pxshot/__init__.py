"""Pxshot Python SDK."""

from .client import PxshotClient
from .config import ClientConfig
from .errors import (
    AuthenticationError,
    ErrorKind,
    NetworkError,
    NotFoundError,
    PxshotError,
    RateLimitError,
    RequestTimeoutError,
    ScreenshotError,
    ServerError,
    ValidationError,
    parse_error,
)
from .models import HealthResult, RateLimitInfo, ScreenshotOptions, StoredScreenshot, UsageResult

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "ClientConfig",
    "ErrorKind",
    "HealthResult",
    "NetworkError",
    "NotFoundError",
    "PxshotClient",
    "PxshotError",
    "RateLimitError",
    "RateLimitInfo",
    "RequestTimeoutError",
    "ScreenshotError",
    "ScreenshotOptions",
    "ServerError",
    "StoredScreenshot",
    "UsageResult",
    "ValidationError",
    "__version__",
    "parse_error",
]
