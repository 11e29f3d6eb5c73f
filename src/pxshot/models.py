"""Pydantic models for Pxshot request and response payloads."""

from __future__ import annotations

import time
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, confloat, conint, constr


NonEmptyStr = constr(min_length=1)
PositiveInt = conint(gt=0)
NonNegativeInt = conint(ge=0)

ScreenshotFormat = Literal["png", "jpeg", "webp"]
WaitUntil = Literal["load", "domcontentloaded", "networkidle0", "networkidle2"]


class ScreenshotOptions(BaseModel):
    """Capture options sent as the body of ``POST /v1/screenshot``."""

    model_config = ConfigDict(extra="allow")

    url: NonEmptyStr
    format: Optional[ScreenshotFormat] = None
    quality: Optional[conint(ge=0, le=100)] = None
    width: Optional[PositiveInt] = None
    height: Optional[PositiveInt] = None
    full_page: Optional[bool] = None
    wait_until: Optional[WaitUntil] = None
    wait_for_selector: Optional[NonEmptyStr] = None
    wait_for_timeout: Optional[NonNegativeInt] = None
    device_scale_factor: Optional[confloat(gt=0)] = None
    store: bool = False

    def to_body(self) -> Dict[str, Any]:
        # unset options are left to the service defaults; store is always explicit
        body = self.model_dump(exclude_none=True)
        body["store"] = bool(self.store)
        return body


class StoredScreenshot(BaseModel):
    """Descriptor returned when a screenshot is captured with ``store=True``."""

    model_config = ConfigDict(extra="allow")

    url: str
    expires_at: str
    width: int
    height: int
    size_bytes: int


class UsageResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    period: str
    screenshots_used: int
    screenshots_limit: int
    storage_used_bytes: int


class HealthResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: Literal["ok", "degraded", "down"]
    message: Optional[str] = None


class RateLimitInfo(BaseModel):
    """Snapshot of the ``X-RateLimit-*`` headers of a single response."""

    model_config = ConfigDict(frozen=True)

    limit: int
    remaining: int
    reset: int = Field(..., description="Unix timestamp (seconds) when the window resets")

    @property
    def retry_after(self) -> float:
        """Seconds until the window resets, never negative."""
        return max(0.0, self.reset - time.time())


__all__ = [
    "HealthResult",
    "RateLimitInfo",
    "ScreenshotFormat",
    "ScreenshotOptions",
    "StoredScreenshot",
    "UsageResult",
    "WaitUntil",
]
