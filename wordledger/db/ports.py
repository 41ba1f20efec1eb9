"""
Persistence port consumed by the progress core.

Every read and write takes the transaction handle handed to the body of
``run_in_transaction``. The body either returns (commit) or raises
(rollback, exception propagates); no partial effect survives an exception,
including KeyboardInterrupt. Storage errors surface as TransactionFailure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from wordledger.core.models import Item, Level, StudyRecord, UnlockState, UserStats
from wordledger.core.outcome import ReviewOutcome

if TYPE_CHECKING:
    from wordledger.db.corpus import Corpus

T = TypeVar("T")


class ProgressStore(ABC):
    """Transactional storage for items, records, stats, unlocks and the trusted anchor."""

    @abstractmethod
    def run_in_transaction(self, body: Callable[[Any], T]) -> T:
        """Run ``body(tx)`` in one transaction; commit on return, roll back on raise."""

    # -- corpus ---------------------------------------------------------------

    @abstractmethod
    def get_item(self, item_id: int, tx: Any) -> Item | None:
        """Load an item, locking it for the rest of the transaction."""

    @abstractmethod
    def update_item_mastery(self, item_id: int, level: int, tx: Any) -> None: ...

    @abstractmethod
    def list_items(self, tx: Any, level_id: int | None = None) -> list[Item]: ...

    @abstractmethod
    def items_for_review(self, tx: Any, level_id: int | None, limit: int) -> list[Item]:
        """Items below the top mastery rung, lowest rung first."""

    @abstractmethod
    def get_level(self, level_id: int, tx: Any) -> Level | None: ...

    @abstractmethod
    def list_levels(self, tx: Any) -> list[Level]: ...

    @abstractmethod
    def seed_corpus(self, corpus: Corpus, tx: Any) -> int:
        """Insert levels and items once. Returns the number of items created."""

    # -- study records & stats ------------------------------------------------

    @abstractmethod
    def insert_study_record(self, record: StudyRecord, tx: Any) -> StudyRecord:
        """Append a record. Returns it with its assigned id."""

    @abstractmethod
    def get_last_study_date_millis(self, tx: Any) -> int | None:
        """Timestamp of the most recent study record, None before the first review."""

    @abstractmethod
    def count_study_records(
        self, tx: Any, item_id: int | None = None, outcome: ReviewOutcome | None = None
    ) -> int: ...

    @abstractmethod
    def list_study_records(self, tx: Any, item_id: int, limit: int | None = None) -> list[StudyRecord]:
        """An item's records, newest first."""

    @abstractmethod
    def get_user_stats(self, tx: Any) -> UserStats: ...

    @abstractmethod
    def update_user_stats(self, stats: UserStats, tx: Any) -> None: ...

    # -- gates & clock --------------------------------------------------------

    @abstractmethod
    def get_unlock_state(self, gate_key: str, tx: Any) -> UnlockState:
        """Gate state, LOCKED with zero usage when never written."""

    @abstractmethod
    def update_unlock_state(self, state: UnlockState, tx: Any) -> None: ...

    @abstractmethod
    def list_unlock_states(self, tx: Any) -> list[UnlockState]: ...

    @abstractmethod
    def get_trusted_anchor(self, tx: Any) -> int:
        """Highest trusted millis recorded so far, 0 before the first clock read."""

    @abstractmethod
    def set_trusted_anchor(self, value: int, tx: Any) -> None: ...
