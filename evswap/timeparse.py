# evswap/timeparse.py
from __future__ import annotations
import logging
from datetime import date, datetime, tzinfo
from typing import Any, Optional
from dateutil import parser as du
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TZ = "Europe/Prague"

logger = logging.getLogger(__name__)

def resolve_tz(name: Optional[str]) -> tzinfo:
    try:
        return ZoneInfo(name or DEFAULT_TZ)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown time zone %r, falling back to %s", name, DEFAULT_TZ)
        return ZoneInfo(DEFAULT_TZ)

def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a booking timestamp cell. Blank or unparseable values give None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    s = str(value).strip()
    if not s or s.lower() == "nan":
        return None
    try:
        return du.parse(s)
    except (ValueError, OverflowError):
        return None

def to_local_date(value: Any, tz: tzinfo) -> Optional[date]:
    """
    Calendar date of `value` in `tz`.

    Aware datetimes are converted to `tz`; naive datetimes and date-only
    strings are taken as already local. Time of day is discarded.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    dt = parse_timestamp(value)
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(tz)
    return dt.date()

def today_local(tz: tzinfo) -> date:
    return datetime.now(tz).date()
