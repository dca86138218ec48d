from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

APPEND_SUCCESS_MESSAGE = "Data appended successfully"
UPDATE_SUCCESS_MESSAGE = "Sheet updated successfully"


class SuccessResponse(BaseModel):
    success: Literal[True] = True
    message: str = Field(min_length=1)


class ErrorResponse(BaseModel):
    error: str
    details: dict[str, object] | None = None


class HealthResponse(BaseModel):
    status: str
    service: str


class ReadyResponse(BaseModel):
    status: str
    service: str
    sheets_backend: str
    credentials_configured: bool
    default_sheet_configured: bool
    bearer_token_configured: bool
    notifications_enabled: bool
    pending_notifications: int = Field(ge=0)
    rate_limited_clients: int = Field(ge=0)
