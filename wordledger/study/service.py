"""
Caller-facing progress service.

Wires the ledger, the trusted clock, the quota manager and the distractor
generator over one persistence port. ``build_service`` is the composition
root: it is the only place that reads settings and creates the engine.

UI layers that used to observe database streams subscribe here instead;
listeners hear about a review only after it has committed.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from config import Settings, get_settings
from wordledger.core.clock import TrustedClockGuard, WallClock, system_wall_clock_millis
from wordledger.core.dates import resolve_timezone
from wordledger.core.exceptions import ItemNotFound
from wordledger.core.models import Item, Level, LevelProgress, StudyRecord, UnlockState, UserStats
from wordledger.core.outcome import ReviewOutcome
from wordledger.db.corpus import load_corpus
from wordledger.db.database import create_db_engine, init_db, make_session_factory
from wordledger.db.ports import ProgressStore
from wordledger.db.sql_store import SqlProgressStore
from wordledger.quiz.distractors import QuizOptions, generate_options
from wordledger.study.ledger import ReviewRecorded, StudyLedger
from wordledger.study.quota import UnlockQuotaManager

ReviewListener = Callable[[ReviewRecorded], None]


class WordLedgerService:
    """Facade exposing the progress core to the outside world."""

    def __init__(
        self,
        store: ProgressStore,
        clock: TrustedClockGuard,
        ledger: StudyLedger,
        quota: UnlockQuotaManager,
        candidate_limit: int = 10,
        distractor_count: int = 3,
        review_queue_limit: int = 20,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.clock = clock
        self.ledger = ledger
        self.quota = quota
        self.candidate_limit = candidate_limit
        self.distractor_count = distractor_count
        self.review_queue_limit = review_queue_limit
        self._rng = rng or random.Random()
        self._listeners: list[ReviewListener] = []

    # ========================================
    # Notifications
    # ========================================

    def subscribe(self, listener: ReviewListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: ReviewRecorded) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:  # A broken listener must not undo a committed review
                logger.exception(f"Review listener {listener!r} failed: {e}")

    # ========================================
    # Core API
    # ========================================

    def record_result(self, item_id: int, outcome: ReviewOutcome | int) -> bool:
        """Record a review; False for an unknown item, raises TransactionFailure on storage errors."""
        try:
            event = self.ledger.record(item_id, outcome)
        except ItemNotFound:
            logger.warning(f"Review for unknown item {item_id} ignored")
            return False
        self._notify(event)
        return True

    def get_quiz_options(self, item: Item, level_id: int | None = None, reverse: bool = False) -> QuizOptions:
        """4-choice options for ``item``, drawing distractors from ``level_id`` (default: the item's level)."""
        level_id = item.level_id if level_id is None else level_id

        def pools(tx) -> tuple[list[Item], list[Item]]:
            return self.store.list_items(tx, level_id=level_id), self.store.list_items(tx)

        same_level, everything = self.store.run_in_transaction(pools)
        return generate_options(
            item,
            same_level,
            everything,
            reverse=reverse,
            rng=self._rng,
            candidate_limit=self.candidate_limit,
            distractor_count=self.distractor_count,
        )

    def effective_now(self) -> int:
        return self.clock.effective_now()

    def is_level_unlocked(self, level_id: int, is_premium: bool = False) -> bool:
        return self.quota.is_level_unlocked(level_id, is_premium=is_premium)

    def consume_daily_quota(self, is_premium: bool) -> bool:
        return self.quota.consume_daily_quota(is_premium)

    # ========================================
    # Supplementary API
    # ========================================

    def get_item(self, item_id: int) -> Item | None:
        return self.ledger.get_item(item_id)

    def review_queue(self, level_id: int | None = None, limit: int | None = None) -> list[Item]:
        return self.ledger.review_queue(level_id, limit or self.review_queue_limit)

    def user_stats(self) -> UserStats:
        return self.ledger.user_stats()

    def level_progress(self) -> list[LevelProgress]:
        return self.ledger.level_progress()

    def total_reviews(self) -> int:
        return self.ledger.total_reviews()

    def records_for_item(self, item_id: int, limit: int | None = None) -> list[StudyRecord]:
        return self.ledger.records_for_item(item_id, limit)

    def item_accuracy(self, item_id: int) -> float:
        return self.ledger.item_accuracy(item_id)

    def list_levels(self) -> list[Level]:
        return self.store.run_in_transaction(self.store.list_levels)

    def unlock_level(
        self, level_id: int, duration_hours: int | None = None, permanent: bool = False
    ) -> UnlockState:
        return self.quota.unlock_level(level_id, duration_hours=duration_hours, permanent=permanent)

    def remaining_unlock_millis(self, level_id: int) -> int:
        return self.quota.remaining_unlock_millis(level_id)

    def remaining_daily_quota(self, is_premium: bool) -> int | None:
        return self.quota.remaining_daily_quota(is_premium)

    def seed_corpus(self, path: Path) -> int:
        """Load a corpus file into an empty database. Returns the number of items created."""
        corpus = load_corpus(path)
        return self.store.run_in_transaction(lambda tx: self.store.seed_corpus(corpus, tx))


def build_service(
    settings: Settings | None = None,
    wall_clock: WallClock = system_wall_clock_millis,
    rng: random.Random | None = None,
) -> WordLedgerService:
    """Composition root: engine, schema, store and components from settings."""
    settings = settings or get_settings()
    tz = resolve_timezone(settings.study_timezone)

    engine = create_db_engine(
        settings.database_url,
        echo=settings.database_echo,
        busy_timeout=settings.sqlite_busy_timeout_seconds,
    )
    init_db(engine)
    store = SqlProgressStore(make_session_factory(engine))

    clock = TrustedClockGuard(store, wall_clock)
    ledger = StudyLedger(store, clock, tz)
    quota = UnlockQuotaManager(
        store,
        clock,
        daily_limit=settings.free_daily_review_limit,
        unlock_duration_hours=settings.unlock_duration_hours,
        tz=tz,
    )
    return WordLedgerService(
        store,
        clock,
        ledger,
        quota,
        candidate_limit=settings.distractor_candidate_limit,
        distractor_count=settings.distractor_count,
        review_queue_limit=settings.review_queue_limit,
        rng=rng,
    )
