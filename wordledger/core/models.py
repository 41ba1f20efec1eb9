"""
Domain values exchanged through the persistence port.

These are plain dataclasses; ORM rows never leave the storage adapter.
"""

from __future__ import annotations

from dataclasses import dataclass

from .outcome import ReviewOutcome


@dataclass(frozen=True)
class Level:
    """A corpus level. Levels without a parent are top-level categories."""

    id: int
    name: str
    order_index: int = 0
    parent_id: int | None = None

    @property
    def is_parent(self) -> bool:
        return self.parent_id is None


@dataclass(frozen=True)
class Item:
    """A vocabulary item (word) and its rung on the mastery ladder."""

    id: int
    level_id: int
    prompt: str
    answer: str
    mastery_level: int = 0


@dataclass(frozen=True)
class StudyRecord:
    """One review event. Append-only."""

    item_id: int
    outcome: ReviewOutcome
    reviewed_at: int  # trusted epoch millis
    id: int | None = None


@dataclass(frozen=True)
class UserStats:
    """Per-user singleton counters."""

    streak_days: int = 0
    last_study_date: str | None = None
    today_studied_count: int = 0
    today_review_count: int = 0
    max_streak: int = 0


@dataclass(frozen=True)
class UnlockState:
    """
    Gate state for a level or a metered feature.

    ``unlocked`` False is LOCKED; True with ``expiry_millis`` None is a
    permanent unlock.
    """

    gate_key: str
    unlocked: bool = False
    expiry_millis: int | None = None
    daily_usage_count: int = 0
    daily_usage_date: str | None = None

    def is_unlocked_at(self, now_millis: int) -> bool:
        if not self.unlocked:
            return False
        return self.expiry_millis is None or now_millis < self.expiry_millis

    def remaining_millis(self, now_millis: int) -> int:
        if not self.is_unlocked_at(now_millis) or self.expiry_millis is None:
            return 0
        return self.expiry_millis - now_millis


@dataclass(frozen=True)
class LevelProgress:
    """Mastery summary for one level."""

    level: Level
    total_items: int
    mastered_items: int

    @property
    def progress_percent(self) -> float:
        if self.total_items == 0:
            return 0.0
        return round(self.mastered_items / self.total_items * 100, 1)
