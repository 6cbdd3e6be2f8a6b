"""Common Pydantic schemas shared across the API."""

from typing import Any, Optional
from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    """Error details inside the envelope."""

    code: str = Field(description="Machine readable error code")
    message: str = Field(description="Human readable message")
    path: str = Field(description="Request path")
    method: str = Field(description="Request method")
    details: Optional[Any] = Field(None, description="Structured context, if any")
    request_id: Optional[str] = Field(None, description="Request id for tracing")


class ErrorResponse(BaseModel):
    """Error response envelope."""

    error: ErrorBody


class MessageResponse(BaseModel):
    """Acknowledgement for operations without a payload."""

    success: bool = True
    message: str
