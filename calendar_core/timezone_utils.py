"""
Timezone utilities for calendar_core.

All stored event times are timezone-aware UTC datetimes. Naive datetimes
handed to the engine are interpreted in the configured local timezone.
"""

from datetime import datetime
import pytz


DEFAULT_TIMEZONE = "UTC"


def get_timezone(timezone_name: str = DEFAULT_TIMEZONE):
    """
    Get a pytz timezone object by name.

    Raises:
        pytz.UnknownTimeZoneError: if the name is not in the tz database.
    """
    return pytz.timezone(timezone_name)


def to_utc_datetime(dt: datetime, timezone_name: str = DEFAULT_TIMEZONE) -> datetime:
    """
    Convert a datetime to UTC.

    Args:
        dt: A datetime object. Naive values are taken to be wall-clock
            time in timezone_name.
        timezone_name: Zone used to localize naive values.

    Returns:
        A timezone-aware datetime in UTC.
    """
    if dt.tzinfo is None:
        local_tz = get_timezone(timezone_name)
        local_dt = local_tz.localize(dt)
        return local_dt.astimezone(pytz.UTC)
    return dt.astimezone(pytz.UTC)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)
