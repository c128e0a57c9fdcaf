"""Response envelope shared by every API route."""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class APIResponse(BaseModel):
    """Standard API response wrapper.

    Success: ``{"success": true, "data": ..., "error": null}``
    Failure: ``{"success": false, "data": null, "error": "File not found: x.txt"}``
    """

    success: bool = Field(..., description="Whether the request was successful")
    data: Any = Field(default=None, description="Response data on success")
    error: Optional[str] = Field(default=None, description="Human-readable error message on failure")
    timestamp: datetime = Field(default_factory=_utcnow, description="Response timestamp")

    @classmethod
    def ok(cls, data: Any) -> "APIResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str) -> "APIResponse":
        return cls(success=False, error=message)
