"""Async Python client for the Pxshot screenshot API."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Type, TypeVar, Union

import httpx
import pydantic

from .config import ClientConfig, ConfigInput, resolve_config, resolve_transport
from .errors import (
    NetworkError,
    PxshotError,
    RequestTimeoutError,
    ValidationError,
    parse_error,
)
from .models import HealthResult, RateLimitInfo, ScreenshotOptions, StoredScreenshot, UsageResult
from .retry import compute_backoff, should_retry

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)
OptionsInput = Union[ScreenshotOptions, Mapping[str, Any], str, None]


class ResponseType(str, Enum):
    JSON = "json"
    BINARY = "binary"


@dataclass(frozen=True)
class RequestSpec:
    method: str
    path: str
    body: Optional[Dict[str, Any]] = None
    response_type: ResponseType = ResponseType.JSON


def parse_rate_limit_headers(headers: httpx.Headers) -> Optional[RateLimitInfo]:
    """Read the ``X-RateLimit-*`` triple; ``None`` unless all three are present integers."""
    limit = headers.get("X-RateLimit-Limit")
    remaining = headers.get("X-RateLimit-Remaining")
    reset = headers.get("X-RateLimit-Reset")
    if not (limit and remaining and reset):
        return None
    try:
        return RateLimitInfo(limit=int(limit), remaining=int(remaining), reset=int(reset))
    except ValueError:
        logger.debug("Ignoring malformed rate limit headers limit=%r remaining=%r reset=%r", limit, remaining, reset)
        return None


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        pass
    try:
        return response.content.decode(response.encoding or "utf-8")
    except (UnicodeDecodeError, LookupError):
        return None


def _field_errors(exc: pydantic.ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for item in exc.errors():
        key = ".".join(str(part) for part in item["loc"]) or "__root__"
        errors.setdefault(key, []).append(item["msg"])
    return errors


class PxshotClient:
    """Client for the Pxshot API.

    ``api_key_or_config`` is either the API key or a :class:`ClientConfig`
    (or a mapping of its fields)::

        async with PxshotClient("px_your_api_key") as client:
            png = await client.screenshot(url="https://example.com")
            stored = await client.screenshot(url="https://example.com", store=True)
            print(stored.url)

    ``last_rate_limit`` holds the rate-limit snapshot of the most recent
    response that carried one. It is shared by every call made through this
    client and is not synchronized: with concurrent calls the last response
    to arrive wins.
    """

    def __init__(
        self,
        api_key_or_config: ConfigInput,
        *,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        self._config = resolve_config(api_key_or_config)
        transport = resolve_transport(self._config)
        self._client = httpx.AsyncClient(transport=transport, timeout=self._config.timeout)
        self._sleep = sleep or asyncio.sleep
        self.last_rate_limit: Optional[RateLimitInfo] = None

    async def __aenter__(self) -> "PxshotClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def screenshot(self, options: OptionsInput = None, **fields: Any) -> Union[bytes, StoredScreenshot]:
        """Capture a screenshot.

        Returns the raw image bytes unless ``store=True``, in which case the
        image is stored by the service and a :class:`StoredScreenshot` is
        returned. Use :meth:`screenshot_bytes` or :meth:`screenshot_store` when
        a single result type is wanted.
        """
        parsed = self._coerce_options(options, fields)
        if parsed.store:
            return await self._capture_stored(parsed)
        return await self._capture_bytes(parsed)

    async def screenshot_bytes(self, options: OptionsInput = None, **fields: Any) -> bytes:
        return await self._capture_bytes(self._coerce_options(options, fields, store=False))

    async def screenshot_store(self, options: OptionsInput = None, **fields: Any) -> StoredScreenshot:
        return await self._capture_stored(self._coerce_options(options, fields, store=True))

    async def usage(self) -> UsageResult:
        """Usage statistics for the current billing period."""
        data = await self._request(RequestSpec("GET", "/v1/usage"))
        return self._parse_model(UsageResult, data)

    async def health(self) -> HealthResult:
        data = await self._request(RequestSpec("GET", "/health"))
        return self._parse_model(HealthResult, data)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _capture_bytes(self, options: ScreenshotOptions) -> bytes:
        spec = RequestSpec("POST", "/v1/screenshot", options.to_body(), ResponseType.BINARY)
        return await self._request(spec)

    async def _capture_stored(self, options: ScreenshotOptions) -> StoredScreenshot:
        data = await self._request(RequestSpec("POST", "/v1/screenshot", options.to_body()))
        return self._parse_model(StoredScreenshot, data)

    @staticmethod
    def _coerce_options(options: OptionsInput, fields: Mapping[str, Any], store: Optional[bool] = None) -> ScreenshotOptions:
        data: Dict[str, Any] = {}
        if isinstance(options, ScreenshotOptions):
            data.update(options.model_dump(exclude_none=True))
        elif isinstance(options, str):
            data["url"] = options
        elif options is not None:
            data.update(options)
        data.update(fields)
        if store is not None:
            data["store"] = store
        try:
            return ScreenshotOptions.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ValidationError("Invalid screenshot options", _field_errors(exc), status=None) from exc

    @staticmethod
    def _parse_model(model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as exc:
            raise PxshotError(f"Unexpected {model.__name__} payload: {exc.error_count()} invalid field(s)") from exc

    def _headers(self, spec: RequestSpec) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Accept": "application/json" if spec.response_type is ResponseType.JSON else "*/*",
            "User-Agent": self._config.user_agent,
        }
        headers.update(self._config.headers)
        if spec.body is not None:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(self, spec: RequestSpec) -> Any:
        try:
            return await self._execute(spec)
        except PxshotError:
            raise
        except Exception as exc:
            raise PxshotError(f"Unknown error: {exc!r}") from exc

    async def _execute(self, spec: RequestSpec) -> Any:
        url = f"{self._config.base_url}{spec.path}"
        headers = self._headers(spec)
        content = json.dumps(spec.body, separators=(",", ":")) if spec.body is not None else None
        retries = self._config.retries
        last_error: Optional[PxshotError] = None

        for attempt in range(retries + 1):
            logger.debug("Pxshot request %s %s attempt=%s", spec.method, url, attempt)
            try:
                response = await self._send(spec.method, url, headers, content)
            except (RequestTimeoutError, NetworkError) as exc:
                if attempt < retries:
                    last_error = exc
                    await self._backoff(attempt, exc.kind.value)
                    continue
                raise

            rate_limit = parse_rate_limit_headers(response.headers)
            if rate_limit is not None:
                self.last_rate_limit = rate_limit

            if response.is_success:
                return self._decode(response, spec.response_type)

            status = response.status_code
            error = parse_error(status, _error_body(response), rate_limit)
            if should_retry(status, attempt, retries):
                last_error = error
                await self._backoff(attempt, f"status={status}", rate_limit if status == 429 else None)
                continue
            raise error

        raise last_error or PxshotError("Request failed after retries")

    async def _send(self, method: str, url: str, headers: Dict[str, str], content: Optional[str]) -> httpx.Response:
        timeout = self._config.timeout
        try:
            return await asyncio.wait_for(
                self._client.request(method, url, headers=headers, content=content),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeoutError(f"Request timed out after {timeout}s", timeout=timeout) from exc
        except PxshotError:
            raise
        except Exception as exc:
            # anything else the transport raises is a connection-level failure
            raise NetworkError(f"Network error: {exc}", exc) from exc

    async def _backoff(self, attempt: int, reason: str, rate_limit: Optional[RateLimitInfo] = None) -> None:
        delay = compute_backoff(attempt, self._config.retry_delay, rate_limit)
        logger.warning(
            "Pxshot request failed (%s); retrying in %.2fs (attempt %s of %s)",
            reason,
            delay,
            attempt + 1,
            self._config.retries,
        )
        await self._sleep(delay)

    @staticmethod
    def _decode(response: httpx.Response, response_type: ResponseType) -> Any:
        if response_type is ResponseType.BINARY:
            return response.content
        try:
            return response.json()
        except ValueError as exc:
            raise PxshotError(f"Invalid JSON response: {exc}", response.status_code) from exc


__all__ = ["PxshotClient", "RequestSpec", "ResponseType", "parse_rate_limit_headers"]
