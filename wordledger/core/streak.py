"""
Study streak law.

The streak counts consecutive calendar days with at least one review.
``last_date`` comes from the most recent study record, so several sessions on
one day never double count and any gap of two or more days restarts at 1.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

from loguru import logger

from .dates import parse_day


class StreakDelta(Enum):
    NONE = "none"
    INCREMENT = "increment"
    RESET = "reset"


def _as_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return parse_day(value)


def streak_delta(last_date: str | date | None, today: str | date) -> StreakDelta:
    """
    Classify the gap between the last study day and today.

    Args:
        last_date: Day of the previous review (``yyyy-mm-dd``), None if never studied
        today: Day of the current review (``yyyy-mm-dd``)

    Returns:
        NONE for the same day, INCREMENT for the next day, RESET otherwise
        (first study day, gaps of 2+ days, unparsable dates).
    """
    if last_date is None:
        return StreakDelta.RESET

    try:
        gap = (_as_date(today) - _as_date(last_date)).days
    except (TypeError, ValueError):
        logger.warning(f"Unparsable streak dates last={last_date!r} today={today!r}; resetting")
        return StreakDelta.RESET

    if gap == 0:
        return StreakDelta.NONE
    if gap == 1:
        return StreakDelta.INCREMENT
    return StreakDelta.RESET


def apply_streak(current: int, delta: StreakDelta) -> int:
    if delta is StreakDelta.NONE:
        return current
    if delta is StreakDelta.INCREMENT:
        return current + 1
    return 1


def update_streak(current: int, last_date: str | date | None, today: str | date) -> int:
    """Convenience wrapper: classify the gap and apply it."""
    return apply_streak(current, streak_delta(last_date, today))
