"""Health check payload."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"] = "ok"
    environment: str
    database: Literal["connected", "disconnected"]
    session_store: Literal["available", "unavailable"] = Field(
        description="Whether login and request validation can read the sessions table",
    )
