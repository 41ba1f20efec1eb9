"""
SQLAlchemy implementation of the persistence port.

One Session per transaction. Rows read for a read-modify-write are loaded
``FOR UPDATE`` (PostgreSQL); on SQLite the engine opens every transaction
with BEGIN IMMEDIATE instead, see ``wordledger.db.database``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from wordledger.core.exceptions import TransactionFailure
from wordledger.core.mastery import MAX_LEVEL
from wordledger.core.models import Item, Level, StudyRecord, UnlockState, UserStats
from wordledger.core.outcome import ReviewOutcome
from wordledger.db.corpus import Corpus
from wordledger.db.database import session_scope
from wordledger.db.models import (
    SINGLETON_ID,
    ItemRow,
    LevelRow,
    StudyRecordRow,
    TrustedAnchorRow,
    UnlockStateRow,
    UserStatsRow,
)
from wordledger.db.ports import ProgressStore

T = TypeVar("T")


def _to_item(row: ItemRow) -> Item:
    return Item(
        id=row.id,
        level_id=row.level_id,
        prompt=row.prompt,
        answer=row.answer,
        mastery_level=row.mastery_level,
    )


def _to_level(row: LevelRow) -> Level:
    return Level(id=row.id, name=row.name, order_index=row.order_index, parent_id=row.parent_id)


def _to_unlock_state(row: UnlockStateRow) -> UnlockState:
    return UnlockState(
        gate_key=row.gate_key,
        unlocked=row.unlocked,
        expiry_millis=row.expiry_millis,
        daily_usage_count=row.daily_usage_count,
        daily_usage_date=row.daily_usage_date,
    )


def _ensure_row(tx: Session, model: type, identity: object, **values) -> None:
    """
    Insert a keyed row unless it already exists.

    Runs before the locking read of a lazily created row, so the read always
    has a row to lock and two first writers never both INSERT.
    """
    dialect = tx.get_bind().dialect.name
    if dialect == "postgresql":
        tx.execute(pg_insert(model).values(**values).on_conflict_do_nothing())
    elif dialect == "sqlite":
        tx.execute(sqlite_insert(model).values(**values).on_conflict_do_nothing())
    elif tx.get(model, identity) is None:
        tx.add(model(**values))
        tx.flush()


def _to_record(row: StudyRecordRow) -> StudyRecord:
    return StudyRecord(
        item_id=row.item_id,
        outcome=ReviewOutcome.from_value(row.outcome),
        reviewed_at=row.reviewed_at,
        id=row.id,
    )


class SqlProgressStore(ProgressStore):
    """ProgressStore backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def run_in_transaction(self, body: Callable[[Session], T]) -> T:
        try:
            with session_scope(self._session_factory) as session:
                return body(session)
        except SQLAlchemyError as e:
            logger.error(f"Transaction rolled back: {e}")
            raise TransactionFailure(str(e)) from e

    # ========================================
    # Corpus
    # ========================================

    def get_item(self, item_id: int, tx: Session) -> Item | None:
        row = tx.get(ItemRow, item_id, with_for_update=True)
        return _to_item(row) if row is not None else None

    def update_item_mastery(self, item_id: int, level: int, tx: Session) -> None:
        tx.execute(update(ItemRow).where(ItemRow.id == item_id).values(mastery_level=level))

    def list_items(self, tx: Session, level_id: int | None = None) -> list[Item]:
        query = select(ItemRow).order_by(ItemRow.id)
        if level_id is not None:
            query = query.where(ItemRow.level_id == level_id)
        return [_to_item(row) for row in tx.scalars(query)]

    def items_for_review(self, tx: Session, level_id: int | None, limit: int) -> list[Item]:
        query = (
            select(ItemRow)
            .where(ItemRow.mastery_level < MAX_LEVEL)
            .order_by(ItemRow.mastery_level, ItemRow.id)
            .limit(limit)
        )
        if level_id is not None:
            query = query.where(ItemRow.level_id == level_id)
        return [_to_item(row) for row in tx.scalars(query)]

    def get_level(self, level_id: int, tx: Session) -> Level | None:
        row = tx.get(LevelRow, level_id)
        return _to_level(row) if row is not None else None

    def list_levels(self, tx: Session) -> list[Level]:
        rows = tx.scalars(select(LevelRow).order_by(LevelRow.order_index, LevelRow.id))
        return [_to_level(row) for row in rows]

    def seed_corpus(self, corpus: Corpus, tx: Session) -> int:
        existing = tx.scalar(select(func.count()).select_from(LevelRow))
        if existing:
            logger.info(f"Corpus already seeded ({existing} levels); skipping")
            return 0

        by_name: dict[str, LevelRow] = {}
        created = 0
        for index, level in enumerate(corpus.levels):
            parent = by_name[level.parent] if level.parent is not None else None
            row = LevelRow(name=level.name, order_index=index, parent_id=parent.id if parent else None)
            tx.add(row)
            tx.flush()
            by_name[level.name] = row

            for item in level.items:
                tx.add(ItemRow(level_id=row.id, prompt=item.prompt, answer=item.answer))
                created += 1

        tx.flush()
        logger.info(f"Seeded {len(corpus.levels)} levels and {created} items")
        return created

    # ========================================
    # Study records & stats
    # ========================================

    def insert_study_record(self, record: StudyRecord, tx: Session) -> StudyRecord:
        row = StudyRecordRow(
            item_id=record.item_id,
            outcome=int(record.outcome),
            reviewed_at=record.reviewed_at,
        )
        tx.add(row)
        tx.flush()
        return StudyRecord(
            item_id=record.item_id,
            outcome=record.outcome,
            reviewed_at=record.reviewed_at,
            id=row.id,
        )

    def get_last_study_date_millis(self, tx: Session) -> int | None:
        return tx.scalar(select(func.max(StudyRecordRow.reviewed_at)))

    def count_study_records(
        self, tx: Session, item_id: int | None = None, outcome: ReviewOutcome | None = None
    ) -> int:
        query = select(func.count()).select_from(StudyRecordRow)
        if item_id is not None:
            query = query.where(StudyRecordRow.item_id == item_id)
        if outcome is not None:
            query = query.where(StudyRecordRow.outcome == int(outcome))
        return tx.scalar(query) or 0

    def list_study_records(self, tx: Session, item_id: int, limit: int | None = None) -> list[StudyRecord]:
        query = (
            select(StudyRecordRow)
            .where(StudyRecordRow.item_id == item_id)
            .order_by(StudyRecordRow.reviewed_at.desc(), StudyRecordRow.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [_to_record(row) for row in tx.scalars(query)]

    def get_user_stats(self, tx: Session) -> UserStats:
        _ensure_row(tx, UserStatsRow, SINGLETON_ID, id=SINGLETON_ID)
        row = tx.get(UserStatsRow, SINGLETON_ID, with_for_update=True)
        return UserStats(
            streak_days=row.streak_days,
            last_study_date=row.last_study_date,
            today_studied_count=row.today_studied_count,
            today_review_count=row.today_review_count,
            max_streak=row.max_streak,
        )

    def update_user_stats(self, stats: UserStats, tx: Session) -> None:
        _ensure_row(tx, UserStatsRow, SINGLETON_ID, id=SINGLETON_ID)
        row = tx.get(UserStatsRow, SINGLETON_ID)
        row.streak_days = stats.streak_days
        row.last_study_date = stats.last_study_date
        row.today_studied_count = stats.today_studied_count
        row.today_review_count = stats.today_review_count
        row.max_streak = stats.max_streak
        tx.flush()

    # ========================================
    # Gates & clock
    # ========================================

    def get_unlock_state(self, gate_key: str, tx: Session) -> UnlockState:
        _ensure_row(tx, UnlockStateRow, gate_key, gate_key=gate_key)
        return _to_unlock_state(tx.get(UnlockStateRow, gate_key, with_for_update=True))

    def update_unlock_state(self, state: UnlockState, tx: Session) -> None:
        _ensure_row(tx, UnlockStateRow, state.gate_key, gate_key=state.gate_key)
        row = tx.get(UnlockStateRow, state.gate_key)
        row.unlocked = state.unlocked
        row.expiry_millis = state.expiry_millis
        row.daily_usage_count = state.daily_usage_count
        row.daily_usage_date = state.daily_usage_date
        tx.flush()

    def list_unlock_states(self, tx: Session) -> list[UnlockState]:
        rows = tx.scalars(select(UnlockStateRow).order_by(UnlockStateRow.gate_key))
        return [_to_unlock_state(row) for row in rows]

    def get_trusted_anchor(self, tx: Session) -> int:
        _ensure_row(tx, TrustedAnchorRow, SINGLETON_ID, id=SINGLETON_ID, monotonic_millis=0)
        return tx.get(TrustedAnchorRow, SINGLETON_ID, with_for_update=True).monotonic_millis

    def set_trusted_anchor(self, value: int, tx: Session) -> None:
        _ensure_row(tx, TrustedAnchorRow, SINGLETON_ID, id=SINGLETON_ID, monotonic_millis=0)
        row = tx.get(TrustedAnchorRow, SINGLETON_ID)
        if value > row.monotonic_millis:
            row.monotonic_millis = value
        tx.flush()
