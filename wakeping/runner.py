from __future__ import annotations

import asyncio
import logging
import time
from asyncio import sleep

import requests

from wakeping.checks.http_check import classify_response, fetch_health
from wakeping.checks.results import AttemptResult, RunOutcome
from wakeping.config import load_check_config
from wakeping.formatting import format_attempt, format_summary
from wakeping.models import UNCONFIGURED_TARGET_URLS, CheckConfig
from wakeping.timestamps import utcnow_iso

logger = logging.getLogger(__name__)

BACKOFF_STEP_S = 1.0


class ConfigurationError(RuntimeError):
    pass


def validate_config(config: CheckConfig) -> None:
    base = config.target_base_url.strip()
    if not base or base in UNCONFIGURED_TARGET_URLS:
        raise ConfigurationError(
            "Configuration Error: TARGET_BASE_URL not set or using default placeholder"
        )


def backoff_delay_s(attempt: int) -> float:
    return BACKOFF_STEP_S * attempt


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


async def _attempt(url: str, config: CheckConfig, attempt: int) -> AttemptResult:
    start = time.perf_counter()
    deadline = start + config.timeout_s
    try:
        resp = await asyncio.wait_for(
            asyncio.to_thread(fetch_health, url, config.timeout_s, deadline),
            timeout=config.timeout_s,
        )
    except (asyncio.TimeoutError, requests.Timeout):
        return AttemptResult(
            attempt=attempt,
            duration_ms=_elapsed_ms(start),
            outcome="timeout",
            detail=f"Request timed out after {config.timeout_ms}ms",
        )
    except Exception as exc:
        return AttemptResult(
            attempt=attempt,
            duration_ms=_elapsed_ms(start),
            outcome="network_error",
            detail=f"{exc.__class__.__name__}: {exc}",
        )
    return classify_response(resp, attempt=attempt, duration_ms=_elapsed_ms(start))


async def run(config: CheckConfig) -> RunOutcome:
    """Run one health check: up to `max_attempts` sequential attempts.

    Never raises; every failure ends up in the returned RunOutcome. An
    unconfigured target fails before any request is made.
    """
    started_at = utcnow_iso()
    try:
        validate_config(config)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return RunOutcome(
            succeeded=False,
            final_error=str(exc),
            started_at=started_at,
            finished_at=utcnow_iso(),
        )

    url = config.target_url
    outcome = RunOutcome(succeeded=False, target_url=url, started_at=started_at)
    logger.info("Starting health check for %s at %s", url, started_at)

    for attempt in range(1, config.max_attempts + 1):
        result = await _attempt(url, config, attempt)
        outcome.attempts.append(result)
        level = logging.INFO if result.healthy else logging.WARNING
        logger.log(level, "%s", format_attempt(result, config.max_attempts, utcnow_iso()))

        if result.healthy:
            outcome.succeeded = True
            break

        outcome.final_error = result.message
        if attempt < config.max_attempts:
            delay = backoff_delay_s(attempt)
            logger.info("Waiting %dms before retry", int(delay * 1000))
            await sleep(delay)

    if outcome.succeeded:
        outcome.final_error = None
    outcome.finished_at = utcnow_iso()
    logger.log(
        logging.INFO if outcome.succeeded else logging.ERROR,
        "%s",
        format_summary(outcome, config.max_attempts),
    )
    return outcome


async def run_scheduled_check() -> RunOutcome | None:
    try:
        return await run(load_check_config())
    except Exception:
        # A bad environment snapshot must never stop the schedule.
        logger.exception("Scheduled health check failed")
        return None
