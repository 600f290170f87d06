"""Common API response schemas."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class SuccessResponse(BaseModel):
    """Acknowledgement for actions without a resource body (e.g. dismissals)."""

    success: bool = True
    message: str = "Operation completed successfully"


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Stable machine-readable error code", examples=["NOT_FOUND"])
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    success: bool = False
    error: ErrorDetail
    request_id: str = Field(..., description="Matches the X-Request-ID response header")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
