# app/utils/timezone_utils.py
import logging
from datetime import date, datetime, time, timezone
from typing import Optional, Tuple

import pytz

from app.core.config import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


def resolve_timezone(name: Optional[str]):
    """Return the pytz zone for `name`, falling back to DEFAULT_TIMEZONE."""
    if not name:
        return pytz.timezone(DEFAULT_TIMEZONE)
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown timezone %r, using %s", name, DEFAULT_TIMEZONE)
        return pytz.timezone(DEFAULT_TIMEZONE)


def day_range(start_date: date, end_date: date, tz_name: Optional[str] = None) -> Tuple[datetime, datetime]:
    """
    Inclusive [start 00:00, end 23:59:59.999999] boundary in the caller's
    timezone, returned as UTC instants. Stored timestamps are never shifted.
    """
    tz = resolve_timezone(tz_name)
    start = tz.localize(datetime.combine(start_date, time.min))
    end = tz.localize(datetime.combine(end_date, time.max))
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes coming back from SQLite are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
