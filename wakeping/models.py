from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_TARGET_URL = "https://your-app.onrender.com"
# Placeholder shipped by earlier RENDER_APP_URL based deployments.
LEGACY_PLACEHOLDER_TARGET_URL = "https://thekavin.com"
UNCONFIGURED_TARGET_URLS = frozenset({PLACEHOLDER_TARGET_URL, LEGACY_PLACEHOLDER_TARGET_URL})

DEFAULT_HEALTH_PATH = "/healthz"
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_ATTEMPTS = 2


class CheckConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_base_url: str = PLACEHOLDER_TARGET_URL
    health_path: str = DEFAULT_HEALTH_PATH
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)

    @property
    def target_url(self) -> str:
        return f"{self.target_base_url}{self.health_path}"

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000
