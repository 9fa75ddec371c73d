# core/timeutils.py
"""
Wall-clock helpers.

Every function that depends on "now" takes it as an argument; callers
that have no clock of their own pass ``utc_now()``.
"""
import logging
import re
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dayplanner.core.exceptions import TimeFormatError

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Choice list offered to users when they pick a timezone.
TIMEZONES = [
    ("UTC", "UTC (Coordinated Universal Time)"),
    ("America/New_York", "Eastern Time (US & Canada)"),
    ("America/Chicago", "Central Time (US & Canada)"),
    ("America/Denver", "Mountain Time (US & Canada)"),
    ("America/Los_Angeles", "Pacific Time (US & Canada)"),
    ("America/Anchorage", "Alaska"),
    ("Pacific/Honolulu", "Hawaii"),
    ("America/Sao_Paulo", "Brasilia"),
    ("Europe/London", "London"),
    ("Europe/Paris", "Paris"),
    ("Europe/Berlin", "Berlin"),
    ("Europe/Moscow", "Moscow"),
    ("Africa/Cairo", "Cairo"),
    ("Asia/Dubai", "Dubai"),
    ("Asia/Karachi", "Karachi"),
    ("Asia/Kolkata", "India (Kolkata)"),
    ("Asia/Singapore", "Singapore"),
    ("Asia/Shanghai", "Beijing/Shanghai"),
    ("Asia/Tokyo", "Tokyo"),
    ("Australia/Sydney", "Sydney"),
    ("Pacific/Auckland", "Auckland"),
]


# =====================================================================
# CLOCK
# =====================================================================

def utc_now() -> datetime:
    """Current aware UTC datetime. Also used as a FastAPI dependency."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =====================================================================
# HH:mm PARSING
# =====================================================================

def is_valid_time(value: str) -> bool:
    return isinstance(value, str) and _HHMM.match(value) is not None


def time_to_minutes(value: str) -> int:
    """
    Convert "HH:mm" to minutes since midnight.

    Raises:
        TimeFormatError: If the value is not a 24-hour HH:mm string
    """
    if not isinstance(value, str):
        raise TimeFormatError(f"Time must be a string in HH:mm format, got {value!r}")
    match = _HHMM.match(value)
    if match is None:
        raise TimeFormatError(f"Time must be in HH:mm format, got {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    """Inverse of time_to_minutes, clamped to the same day."""
    minutes = max(0, min(minutes, 23 * 60 + 59))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def compare_times(first: str, second: str) -> int:
    return time_to_minutes(first) - time_to_minutes(second)


def format_time_display(value: str) -> str:
    """Format "HH:mm" for display, e.g. "09:00" -> "9:00 AM"."""
    minutes = time_to_minutes(value)
    hours, mins = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{mins:02d} {period}"


def format_remaining(minutes: int) -> str:
    """Render a duration as "Xh Ym", or "Ym" below one hour."""
    hours, mins = divmod(max(0, minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


# =====================================================================
# TIMEZONES
# =====================================================================

def resolve_timezone(zone: Optional[str]) -> ZoneInfo:
    """
    Resolve an IANA zone name.

    Unknown or empty names fall back to UTC so a bad stored timezone
    never blocks a user's reminders.
    """
    if not zone:
        return UTC
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning(f"Unknown timezone {zone!r}, falling back to UTC")
        return UTC


def local_now(zone: Optional[str], now: Optional[datetime] = None) -> datetime:
    if now is None:
        now = utc_now()
    return ensure_utc(now).astimezone(resolve_timezone(zone))


def local_date(zone: Optional[str], now: Optional[datetime] = None) -> date:
    return local_now(zone, now).date()


def current_time_in_zone(zone: Optional[str], now: Optional[datetime] = None) -> str:
    """Wall-clock "HH:mm" in the given zone."""
    return local_now(zone, now).strftime("%H:%M")


def current_date_in_zone(zone: Optional[str], now: Optional[datetime] = None) -> str:
    """Calendar day "YYYY-MM-DD" in the given zone."""
    return local_date(zone, now).isoformat()
