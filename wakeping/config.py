from __future__ import annotations

import os
from collections.abc import Mapping

from dotenv import load_dotenv

from wakeping.models import (
    DEFAULT_HEALTH_PATH,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TIMEOUT_MS,
    PLACEHOLDER_TARGET_URL,
    CheckConfig,
)

load_dotenv()


def _positive_int(raw: str | None, default: int) -> int:
    # Missing, malformed or non-positive values fall back to the default.
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    SCHEDULER_ENABLED: bool = _flag(os.getenv("SCHEDULER_ENABLED"), True)
    SCHEDULE_INTERVAL_MINUTES: int = _positive_int(
        os.getenv("SCHEDULE_INTERVAL_MINUTES"), 14
    )
    SCHEDULE_START_HOUR: int = int(os.getenv("SCHEDULE_START_HOUR", 7))
    SCHEDULE_END_HOUR: int = int(os.getenv("SCHEDULE_END_HOUR", 12))
    SCHEDULE_WEEKDAYS: str = os.getenv(
        "SCHEDULE_WEEKDAYS", "mon,tue,wed,thu,fri,sat,sun"
    )
    SCHEDULE_TIMEZONE: str = os.getenv("SCHEDULE_TIMEZONE", "Asia/Kolkata")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()


settings = Settings()


def load_check_config(environ: Mapping[str, str] | None = None) -> CheckConfig:
    """Build a fresh CheckConfig snapshot from the environment.

    Called once per run so every run sees a fixed configuration.
    """
    env = os.environ if environ is None else environ
    return CheckConfig(
        target_base_url=(
            env.get("TARGET_BASE_URL") or env.get("RENDER_APP_URL") or PLACEHOLDER_TARGET_URL
        ).strip(),
        health_path=env.get("HEALTH_ENDPOINT") or DEFAULT_HEALTH_PATH,
        timeout_ms=_positive_int(env.get("TIMEOUT_MS"), DEFAULT_TIMEOUT_MS),
        max_attempts=_positive_int(env.get("RETRY_ATTEMPTS"), DEFAULT_MAX_ATTEMPTS),
    )


def describe_environment(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Raw check settings as provided, for the debug endpoint."""
    env = os.environ if environ is None else environ
    target = env.get("TARGET_BASE_URL") or "NOT SET"
    if not env.get("TARGET_BASE_URL") and env.get("RENDER_APP_URL"):
        target = f"{env['RENDER_APP_URL']} (from RENDER_APP_URL)"
    return {
        "TARGET_BASE_URL": target,
        "HEALTH_ENDPOINT": env.get("HEALTH_ENDPOINT")
        or f"NOT SET (default: {DEFAULT_HEALTH_PATH})",
        "TIMEOUT_MS": env.get("TIMEOUT_MS") or f"NOT SET (default: {DEFAULT_TIMEOUT_MS})",
        "RETRY_ATTEMPTS": env.get("RETRY_ATTEMPTS")
        or f"NOT SET (default: {DEFAULT_MAX_ATTEMPTS})",
    }
