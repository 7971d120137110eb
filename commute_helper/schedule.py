"""Time gates deciding whether the helper should call the providers right now."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from .config import settings
from .models import HelperConfig
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="schedule")


def current_time() -> datetime:
    """Wall-clock now, in the configured timezone when one is set."""
    if settings.timezone:
        return datetime.now(ZoneInfo(settings.timezone))
    return datetime.now()


def dashboard_weekday(now: datetime) -> int:
    """Weekday number in the dashboard's convention (0 = Sunday ... 6 = Saturday)."""
    return (now.weekday() + 1) % 7


def should_fetch(config: HelperConfig, now: datetime | None = None) -> bool:
    """Return True if fetching is allowed at `now`.

    Without a schedule the helper is always on. With one, the weekday must be
    listed and the time of day must fall in [start, stop). Both bounds are
    compared as same-day times, so an overnight window such as 22:00-06:00
    never matches.
    """
    if config.schedule is None:
        return True

    now = now or current_time()
    schedule = config.schedule
    if dashboard_weekday(now) not in schedule.days:
        logger.debug("Outside scheduled days", extra={"weekday": dashboard_weekday(now)})
        return False

    clock = now.time()
    return schedule.times.start_time() <= clock < schedule.times.stop_time()


def is_commute_minute(now: datetime | None = None) -> bool:
    """Commute times are only fetched on even minutes to stay within the maps API quota."""
    now = now or current_time()
    return now.minute % 2 == 0
