from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(description="Health status")


class PingResponse(BaseModel):
    success: bool
    message: str | None = Field(default=None, description="Set when the check succeeded")
    error: str | None = Field(default=None, description="Set when the check failed")
    timestamp: str


class ResolvedConfig(BaseModel):
    target_base_url: str
    health_path: str
    timeout_ms: int = Field(gt=0)
    max_attempts: int = Field(ge=1)
    target_url: str
    configured: bool


class DebugResponse(BaseModel):
    environment_variables: dict[str, str]
    resolved: ResolvedConfig
    schedule: str
    scheduler_enabled: bool
    timestamp: str
