"""
Calendar helpers.

Trusted time is kept as epoch milliseconds; streak and quota logic work on
calendar days rendered as ``yyyy-mm-dd`` strings in the study timezone.
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DATE_FORMAT = "%Y-%m-%d"


def resolve_timezone(name: str) -> tzinfo:
    """Resolve an IANA zone name; ``UTC`` never needs the tz database."""
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e


def date_for_millis(millis: int, tz: tzinfo = timezone.utc) -> date:
    """Calendar date of an epoch-millisecond instant in ``tz``."""
    return datetime.fromtimestamp(millis / 1000, tz=tz).date()


def day_string(millis: int, tz: tzinfo = timezone.utc) -> str:
    """``yyyy-mm-dd`` for an epoch-millisecond instant in ``tz``."""
    return date_for_millis(millis, tz).strftime(DATE_FORMAT)


def parse_day(value: str) -> date:
    """Parse a ``yyyy-mm-dd`` string. Raises ValueError when malformed."""
    return datetime.strptime(value, DATE_FORMAT).date()
