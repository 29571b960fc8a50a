"""
APScheduler wiring for the scheduled health check.

The check fires cron style: on minutes of the hour that are multiples of the
interval, inside an hour range and a set of weekdays, evaluated in a named
timezone. Defaults follow the keep-awake cadence: every 14 minutes,
07:00-12:00 Asia/Kolkata, every day.

Call ``build_scheduler()`` once on app boot, start it inside the FastAPI
lifespan and shut it down on exit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from wakeping.config import settings
from wakeping.runner import run_scheduled_check

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
HEALTH_CHECK_JOB_ID = "scheduled-health-check"


@dataclass(frozen=True)
class ScheduleWindow:
    interval_minutes: int = 14
    start_hour: int = 7
    end_hour: int = 12
    weekdays: frozenset[int] = frozenset(range(7))
    timezone: str = "Asia/Kolkata"

    def __post_init__(self) -> None:
        if self.interval_minutes < 1 or self.interval_minutes > 60:
            raise ValueError("interval_minutes must be between 1 and 60")
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(
                f"invalid hour window {self.start_hour}-{self.end_hour}"
            )
        if not self.weekdays:
            raise ValueError("at least one weekday is required")
        ZoneInfo(self.timezone)

    def trigger(self) -> CronTrigger:
        # end_hour is exclusive; cron hour ranges are inclusive.
        return CronTrigger(
            minute=f"*/{self.interval_minutes}",
            hour=f"{self.start_hour}-{self.end_hour - 1}",
            day_of_week=",".join(WEEKDAY_NAMES[d] for d in sorted(self.weekdays)),
            timezone=ZoneInfo(self.timezone),
        )

    def describe(self) -> str:
        days = ",".join(WEEKDAY_NAMES[d] for d in sorted(self.weekdays))
        return (
            f"Every {self.interval_minutes} minutes, "
            f"{self.start_hour:02d}:00-{self.end_hour:02d}:00 {self.timezone} ({days})"
        )


def parse_weekdays(raw: str) -> frozenset[int]:
    days: set[int] = set()
    for token in raw.split(","):
        token = token.strip().lower()[:3]
        if not token:
            continue
        if token not in WEEKDAY_NAMES:
            raise ValueError(f"Unknown weekday: {token!r}")
        days.add(WEEKDAY_NAMES.index(token))
    return frozenset(days)


def window_from_settings() -> ScheduleWindow:
    return ScheduleWindow(
        interval_minutes=settings.SCHEDULE_INTERVAL_MINUTES,
        start_hour=settings.SCHEDULE_START_HOUR,
        end_hour=settings.SCHEDULE_END_HOUR,
        weekdays=parse_weekdays(settings.SCHEDULE_WEEKDAYS),
        timezone=settings.SCHEDULE_TIMEZONE,
    )


def build_scheduler(window: ScheduleWindow) -> AsyncIOScheduler:
    """Return a configured (not yet started) AsyncIOScheduler."""
    scheduler = AsyncIOScheduler(timezone=ZoneInfo(window.timezone))
    scheduler.add_job(
        run_scheduled_check,
        trigger=window.trigger(),
        id=HEALTH_CHECK_JOB_ID,
        name="health check",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=60,
    )
    logger.info("Scheduled health check registered: %s", window.describe())
    return scheduler
