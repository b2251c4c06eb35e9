from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class DebugPayload(BaseModel):
    """Body of ``POST /api/debug``. Presence of code and language is checked by the gateway."""

    model_config = ConfigDict(populate_by_name=True)

    code: Optional[str] = None
    language: Optional[str] = None
    error_output: Optional[str] = Field(default=None, alias="errorOutput")


class HealthResponse(BaseModel):
    ok: bool
    time: str
    provider: str


class ErrorResponse(BaseModel):
    error: str


class ProviderErrorResponse(BaseModel):
    error: str
    provider: str
    status: Optional[int] = None
    body: Any = None
    message: str
