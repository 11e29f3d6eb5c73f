from __future__ import annotations

import time

import pytest

from pxshot.errors import (
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
    classify,
    extract_message,
    parse_error,
)
from pxshot.models import RateLimitInfo


def test_validation_error_keeps_field_errors() -> None:
    error = parse_error(400, {"message": "m", "errors": {"url": ["required"]}})
    assert isinstance(error, ValidationError)
    assert error.kind is ErrorKind.VALIDATION
    assert error.message == "m"
    assert error.errors == {"url": ["required"]}
    assert error.status == 400
    assert error.code == "validation_error"


def test_authentication_error() -> None:
    error = parse_error(401, {"message": "bad"})
    assert isinstance(error, AuthenticationError)
    assert error.status == 401
    assert error.message == "bad"


def test_not_found_error() -> None:
    error = parse_error(404, {"error": "missing"})
    assert isinstance(error, NotFoundError)
    assert error.message == "missing"


def test_screenshot_error_coerces_code() -> None:
    error = parse_error(422, {"message": "page crashed", "code": 17})
    assert isinstance(error, ScreenshotError)
    assert error.code == "17"
    assert parse_error(422, {"message": "x"}).code == "screenshot_failed"


def test_rate_limit_error_synthesizes_snapshot() -> None:
    before = int(time.time())
    error = parse_error(429, {"message": "slow down"})
    assert isinstance(error, RateLimitError)
    assert error.rate_limit.limit == 0
    assert error.rate_limit.remaining == 0
    assert before + 59 <= error.rate_limit.reset <= int(time.time()) + 61


def test_rate_limit_error_uses_supplied_snapshot() -> None:
    snapshot = RateLimitInfo(limit=100, remaining=0, reset=int(time.time()) + 10)
    error = classify(429, "limited", snapshot)
    assert error.rate_limit is snapshot
    assert error.message == "limited"


@pytest.mark.parametrize("status", [500, 503, 599])
def test_server_errors(status: int) -> None:
    error = parse_error(status, None)
    assert isinstance(error, ServerError)
    assert error.status == status
    assert error.message == "Unknown error"


def test_other_status_is_generic() -> None:
    error = parse_error(409, {"message": "conflict"})
    assert type(error) is PxshotError
    assert error.kind is ErrorKind.GENERIC
    assert error.status == 409


@pytest.mark.parametrize(
    "body,expected",
    [
        ("plain text", "plain text"),
        ({"message": "from message", "error": "from error"}, "from message"),
        ({"message": 3, "error": "from error"}, "from error"),
        ({"detail": "ignored"}, "Unknown error"),
        (["not", "a", "mapping"], "Unknown error"),
        (None, "Unknown error"),
    ],
)
def test_extract_message(body: object, expected: str) -> None:
    assert extract_message(body) == expected


def test_retryable_depends_on_status_only() -> None:
    assert parse_error(503, None).retryable
    assert parse_error(429, None).retryable
    assert parse_error(408, None).retryable
    assert not parse_error(400, None).retryable
    assert not parse_error(501, None).retryable
    assert RequestTimeoutError(timeout=1.0).retryable
    assert NetworkError("down").retryable
    assert not PxshotError("generic").retryable


def test_errors_are_read_only() -> None:
    error = parse_error(400, {"message": "m", "errors": {"url": ["required"]}})
    with pytest.raises(AttributeError):
        error.status = 500  # type: ignore[misc]
    error.errors["url"].append("mutated")
    assert error.errors == {"url": ["required"]}


def test_network_error_chains_cause() -> None:
    cause = ConnectionResetError("reset")
    error = NetworkError("Network error: reset", cause)
    assert error.cause is cause
    assert error.__cause__ is cause
    assert error.code == "network_error"
