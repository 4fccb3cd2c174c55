"""
Date and season utilities.

All timestamps are stored as naive UTC. ESPN scoreboard dates are
expressed as YYYYMMDD strings in US Eastern time, which is close enough
to UTC calendar dates for daily sync windows.
"""
from datetime import datetime, date as DateType, timedelta, timezone
from typing import Optional, Union, Tuple

UTC = timezone.utc


# =============================================================================
# SEASON UTILITIES
# =============================================================================

# Active season range, (month, day) inclusive on both ends.
# The NBA season spans two calendar years: mid-October through the Finals.
NBA_SEASON = {"start": (10, 15), "end": (6, 20)}


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)."""
    return datetime.now(UTC).replace(tzinfo=None)


def _as_datetime(value: Optional[Union[datetime, DateType]]) -> datetime:
    if value is None:
        return utcnow()
    if isinstance(value, DateType) and not isinstance(value, datetime):
        return datetime.combine(value, datetime.min.time())
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def is_in_season(value: Optional[Union[datetime, DateType]] = None) -> bool:
    """
    Check whether a date falls inside the active NBA season.

    Offseason is June 21 through October 14.

    Examples:
        >>> is_in_season(datetime(2025, 1, 15))
        True
        >>> is_in_season(datetime(2025, 8, 15))
        False
        >>> is_in_season(datetime(2025, 10, 10))
        False
    """
    current = _as_datetime(value)
    start_month, start_day = NBA_SEASON["start"]
    end_month, end_day = NBA_SEASON["end"]

    season_start = datetime(current.year, start_month, start_day)
    season_end = datetime(current.year, end_month, end_day, 23, 59, 59)

    # Season wraps the new year
    return current >= season_start or current <= season_end


def is_offseason(value: Optional[Union[datetime, DateType]] = None) -> bool:
    return not is_in_season(value)


def current_season_year(value: Optional[Union[datetime, DateType]] = None) -> int:
    """
    ESPN season year for a date: the calendar year the season ends in.

    October 2025 through September 2026 belong to season 2026.
    """
    current = _as_datetime(value)
    return current.year + 1 if current.month >= 10 else current.year


# =============================================================================
# ESPN DATE HELPERS
# =============================================================================

def to_espn_date(value: Union[datetime, DateType]) -> str:
    """Format a date as the YYYYMMDD string ESPN scoreboards expect."""
    return value.strftime("%Y%m%d")


def espn_date_range(start: Union[datetime, DateType], end: Union[datetime, DateType]) -> str:
    """Format an inclusive date range as YYYYMMDD-YYYYMMDD."""
    return f"{to_espn_date(start)}-{to_espn_date(end)}"


def week_bounds(value: Optional[Union[datetime, DateType]] = None) -> Tuple[DateType, DateType]:
    """Monday through Sunday of the week containing ``value``."""
    current = _as_datetime(value).date()
    monday = current - timedelta(days=current.weekday())
    return monday, monday + timedelta(days=6)


def day_bounds(value: Optional[Union[datetime, DateType]] = None) -> Tuple[datetime, datetime]:
    """Start (inclusive) and end (exclusive) of the UTC day containing ``value``."""
    start = _as_datetime(value).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)
