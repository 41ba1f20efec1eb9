"""
Study Ledger.

Records review outcomes. A single transaction inserts the study record,
moves the item on the mastery ladder, bumps the daily counters and applies
the streak law; either all of it commits or none of it does.

Records are stamped with trusted time observed inside that same
transaction, so the streak day of a review cannot be forged by moving the
device clock.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timezone, tzinfo
from typing import Any

from loguru import logger

from wordledger.core.clock import TrustedClockGuard
from wordledger.core.dates import day_string
from wordledger.core.exceptions import ItemNotFound
from wordledger.core.mastery import advance, is_mastered
from wordledger.core.models import Item, LevelProgress, StudyRecord, UserStats
from wordledger.core.outcome import ReviewOutcome
from wordledger.core.streak import StreakDelta, apply_streak, streak_delta
from wordledger.db.ports import ProgressStore


@dataclass(frozen=True)
class ReviewRecorded:
    """Committed effects of one review."""

    record: StudyRecord
    old_level: int
    new_level: int
    stats: UserStats
    streak_delta: StreakDelta


class StudyLedger:
    """
    Orchestrates review recording over the persistence port.

    The port's transaction is the only serialization point: concurrent
    ``record`` calls on one item apply their transitions one after the other.
    """

    def __init__(
        self,
        store: ProgressStore,
        clock: TrustedClockGuard,
        tz: tzinfo = timezone.utc,
    ):
        self._store = store
        self._clock = clock
        self._tz = tz

    def record(self, item_id: int, outcome: ReviewOutcome | int) -> ReviewRecorded:
        """
        Record a review and return its committed effects.

        Raises:
            ItemNotFound: If ``item_id`` is unknown (nothing is written)
            TransactionFailure: If storage fails (nothing is written)
        """
        if not isinstance(outcome, ReviewOutcome):
            outcome = ReviewOutcome.from_value(outcome)

        result = self._store.run_in_transaction(lambda tx: self._apply(tx, item_id, outcome))
        logger.debug(
            f"Item {item_id}: {outcome.name} level {result.old_level}->{result.new_level}, "
            f"streak {result.stats.streak_days}"
        )
        return result

    def _apply(self, tx: Any, item_id: int, outcome: ReviewOutcome) -> ReviewRecorded:
        item = self._store.get_item(item_id, tx)
        if item is None:
            raise ItemNotFound(item_id)

        now = self._clock.observe(tx)
        today = day_string(now, self._tz)
        last_millis = self._store.get_last_study_date_millis(tx)
        last_date = day_string(last_millis, self._tz) if last_millis is not None else None

        new_level = advance(item.mastery_level, outcome)
        record = self._store.insert_study_record(
            StudyRecord(item_id=item_id, outcome=outcome, reviewed_at=now), tx
        )
        self._store.update_item_mastery(item_id, new_level, tx)

        stats = self._store.get_user_stats(tx)
        delta = streak_delta(last_date, today)
        if last_date != today:
            # First review of a new day: the daily counters start over
            stats = replace(stats, today_studied_count=0, today_review_count=0)
        streak = apply_streak(stats.streak_days, delta)
        stats = replace(
            stats,
            streak_days=streak,
            max_streak=max(stats.max_streak, streak),
            last_study_date=today,
            today_studied_count=stats.today_studied_count + 1,
            today_review_count=stats.today_review_count + 1,
        )
        self._store.update_user_stats(stats, tx)

        return ReviewRecorded(
            record=record,
            old_level=item.mastery_level,
            new_level=new_level,
            stats=stats,
            streak_delta=delta,
        )

    # ========================================
    # Read side
    # ========================================

    def get_item(self, item_id: int) -> Item | None:
        return self._store.run_in_transaction(lambda tx: self._store.get_item(item_id, tx))

    def review_queue(self, level_id: int | None = None, limit: int = 20) -> list[Item]:
        """Items still below the top rung, lowest mastery first."""
        return self._store.run_in_transaction(
            lambda tx: self._store.items_for_review(tx, level_id, limit)
        )

    def user_stats(self) -> UserStats:
        return self._store.run_in_transaction(self._store.get_user_stats)

    def max_streak(self) -> int:
        """Longest streak ever reached."""
        return self.user_stats().max_streak

    def total_reviews(self) -> int:
        return self._store.run_in_transaction(self._store.count_study_records)

    def records_for_item(self, item_id: int, limit: int | None = None) -> list[StudyRecord]:
        """An item's review history, newest first."""
        return self._store.run_in_transaction(
            lambda tx: self._store.list_study_records(tx, item_id, limit)
        )

    def item_accuracy(self, item_id: int) -> float:
        """Share of an item's reviews answered KNOWN; 0.0 before the first review."""

        def body(tx: Any) -> float:
            total = self._store.count_study_records(tx, item_id)
            if total == 0:
                return 0.0
            known = self._store.count_study_records(tx, item_id, ReviewOutcome.KNOWN)
            return known / total

        return self._store.run_in_transaction(body)

    def level_progress(self) -> list[LevelProgress]:
        """Total and mastered item counts for every level."""

        def body(tx: Any) -> list[LevelProgress]:
            items = self._store.list_items(tx)
            progress = []
            for level in self._store.list_levels(tx):
                in_level = [item for item in items if item.level_id == level.id]
                progress.append(
                    LevelProgress(
                        level=level,
                        total_items=len(in_level),
                        mastered_items=sum(1 for item in in_level if is_mastered(item.mastery_level)),
                    )
                )
            return progress

        return self._store.run_in_transaction(body)
