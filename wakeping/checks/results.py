from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Classification = Literal[
    "healthy",
    "unhealthy_status",
    "http_error",
    "network_error",
    "timeout",
]


@dataclass
class AttemptResult:
    attempt: int
    duration_ms: int
    outcome: Classification
    status_code: int | None = None
    detail: str | None = None

    @property
    def healthy(self) -> bool:
        return self.outcome == "healthy"

    @property
    def message(self) -> str:
        if self.outcome == "healthy":
            return "Healthy"
        if self.outcome == "unhealthy_status":
            return f"Unexpected status: {self.detail or 'unknown'}"
        if self.outcome == "http_error":
            if self.detail:
                return f"HTTP {self.status_code}: {self.detail}"
            return f"HTTP {self.status_code}"
        if self.outcome == "timeout":
            return self.detail or "Request timed out"
        return self.detail or "Network error"


@dataclass
class RunOutcome:
    succeeded: bool
    attempts: list[AttemptResult] = field(default_factory=list)
    final_error: str | None = None
    target_url: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
