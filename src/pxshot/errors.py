"""Typed errors raised by the Pxshot client.

Every failure that escapes :class:`pxshot.PxshotClient` is a
:class:`PxshotError`. Each subclass carries a fixed :class:`ErrorKind` tag so
callers can dispatch either on the class (``except RateLimitError``) or on
``error.kind`` without string matching.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .models import RateLimitInfo

# Status codes that are safe to retry
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

# Window assumed for a 429 that carried no rate-limit headers
DEFAULT_RATE_LIMIT_WINDOW = 60


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    SCREENSHOT = "screenshot"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    NETWORK = "network"
    SERVER = "server"
    GENERIC = "generic"


class PxshotError(Exception):
    """Base error for all Pxshot failures.

    Fields are read-only once the error is constructed.
    """

    kind: ErrorKind = ErrorKind.GENERIC
    default_code: Optional[str] = None

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self._message = message
        self._status = status
        self._code = code if code is not None else self.default_code

    @property
    def message(self) -> str:
        return self._message

    @property
    def status(self) -> Optional[int]:
        """HTTP status code, if the error came from a response."""
        return self._status

    @property
    def code(self) -> Optional[str]:
        """Machine-readable error code."""
        return self._code

    @property
    def retryable(self) -> bool:
        if self._status is not None:
            return self._status in RETRYABLE_STATUS_CODES
        return self.kind in (ErrorKind.TIMEOUT, ErrorKind.NETWORK)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self._message!r}, status={self._status!r}, code={self._code!r})"


class ValidationError(PxshotError):
    """Request rejected as invalid (400), or options that failed local validation."""

    kind = ErrorKind.VALIDATION
    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        errors: Optional[Mapping[str, List[str]]] = None,
        status: Optional[int] = 400,
    ) -> None:
        super().__init__(message, status)
        self._errors = dict(errors) if errors is not None else None

    @property
    def errors(self) -> Optional[Dict[str, List[str]]]:
        """Field-level validation messages keyed by field name."""
        if self._errors is None:
            return None
        return {field: list(messages) for field, messages in self._errors.items()}


class AuthenticationError(PxshotError):
    kind = ErrorKind.AUTHENTICATION
    default_code = "authentication_error"

    def __init__(self, message: str = "Invalid or missing API key") -> None:
        super().__init__(message, 401)


class NotFoundError(PxshotError):
    kind = ErrorKind.NOT_FOUND
    default_code = "not_found"

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, 404)


class ScreenshotError(PxshotError):
    """The service could not capture the page (422)."""

    kind = ErrorKind.SCREENSHOT
    default_code = "screenshot_failed"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message, 422, code)


class RateLimitError(PxshotError):
    kind = ErrorKind.RATE_LIMIT
    default_code = "rate_limit_exceeded"

    def __init__(self, message: str, rate_limit: RateLimitInfo) -> None:
        super().__init__(message, 429)
        self._rate_limit = rate_limit

    @property
    def rate_limit(self) -> RateLimitInfo:
        return self._rate_limit

    @property
    def retry_after(self) -> float:
        """Seconds until the rate limit window resets."""
        return self._rate_limit.retry_after


class RequestTimeoutError(PxshotError):
    kind = ErrorKind.TIMEOUT
    default_code = "timeout"

    def __init__(self, message: str = "Request timed out", timeout: Optional[float] = None) -> None:
        super().__init__(message)
        self._timeout = timeout

    @property
    def timeout(self) -> Optional[float]:
        """Per-attempt timeout in seconds that elapsed."""
        return self._timeout


class NetworkError(PxshotError):
    kind = ErrorKind.NETWORK
    default_code = "network_error"

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self._cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        return self._cause


class ServerError(PxshotError):
    kind = ErrorKind.SERVER
    default_code = "server_error"

    def __init__(self, message: str = "Internal server error", status: int = 500) -> None:
        super().__init__(message, status)


def extract_message(body: Any) -> str:
    if isinstance(body, str):
        return body
    if isinstance(body, Mapping):
        message = body.get("message")
        if isinstance(message, str):
            return message
        error = body.get("error")
        if isinstance(error, str):
            return error
    return "Unknown error"


def parse_error(status: int, body: Any, rate_limit: Optional[RateLimitInfo] = None) -> PxshotError:
    """Map an error response to the matching :class:`PxshotError` subclass.

    Never raises and performs no I/O. ``body`` is the decoded JSON payload, the
    raw text when the payload was not JSON, or ``None``.
    """

    message = extract_message(body)
    fields = body if isinstance(body, Mapping) else {}

    if status == 400:
        errors = fields.get("errors") if "errors" in fields else None
        return ValidationError(message, errors if isinstance(errors, Mapping) else None)
    if status == 401:
        return AuthenticationError(message)
    if status == 404:
        return NotFoundError(message)
    if status == 422:
        code = str(fields["code"]) if "code" in fields else None
        return ScreenshotError(message, code)
    if status == 429:
        if rate_limit is None:
            rate_limit = RateLimitInfo(
                limit=0,
                remaining=0,
                reset=int(time.time()) + DEFAULT_RATE_LIMIT_WINDOW,
            )
        return RateLimitError(message, rate_limit)
    if status >= 500:
        return ServerError(message, status)
    return PxshotError(message, status)


classify = parse_error


__all__ = [
    "AuthenticationError",
    "ErrorKind",
    "NetworkError",
    "NotFoundError",
    "PxshotError",
    "RETRYABLE_STATUS_CODES",
    "RateLimitError",
    "RequestTimeoutError",
    "ScreenshotError",
    "ServerError",
    "ValidationError",
    "classify",
    "extract_message",
    "parse_error",
]
