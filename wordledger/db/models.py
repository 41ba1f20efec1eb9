"""
SQLAlchemy models for the progress database.

Tables:
- levels: corpus levels (parent categories and their units)
- items: vocabulary items with their mastery rung
- study_records: append-only review log
- user_stats: singleton streak/daily counters (id = 1)
- trusted_anchor: singleton monotonic clock anchor (id = 1)
- unlock_states: per-gate unlock expiry and daily usage counters
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from wordledger.core.mastery import MAX_LEVEL, MIN_LEVEL

SINGLETON_ID = 1


class Base(DeclarativeBase):
    pass


class LevelRow(Base):
    __tablename__ = "levels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("levels.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(default=func.now())

    items: Mapped[List["ItemRow"]] = relationship(back_populates="level")

    def __repr__(self) -> str:
        return f"<LevelRow(id={self.id}, name={self.name!r})>"


class ItemRow(Base):
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint(
            f"mastery_level BETWEEN {MIN_LEVEL} AND {MAX_LEVEL}",
            name="ck_items_mastery_level",
        ),
        Index("ix_items_level_mastery", "level_id", "mastery_level"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    level_id: Mapped[int] = mapped_column(
        ForeignKey("levels.id", ondelete="CASCADE"), nullable=False
    )
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    mastery_level: Mapped[int] = mapped_column(Integer, default=MIN_LEVEL, nullable=False)

    level: Mapped[LevelRow] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return f"<ItemRow(id={self.id}, prompt={self.prompt!r}, mastery={self.mastery_level})>"


class StudyRecordRow(Base):
    __tablename__ = "study_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(
        ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    outcome: Mapped[int] = mapped_column(Integer, nullable=False)
    reviewed_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)


class UserStatsRow(Base):
    __tablename__ = "user_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    streak_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_study_date: Mapped[Optional[str]] = mapped_column(Text)
    today_studied_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    today_review_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class TrustedAnchorRow(Base):
    __tablename__ = "trusted_anchor"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    monotonic_millis: Mapped[int] = mapped_column(BigInteger, nullable=False)


class UnlockStateRow(Base):
    __tablename__ = "unlock_states"

    gate_key: Mapped[str] = mapped_column(Text, primary_key=True)
    unlocked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    expiry_millis: Mapped[Optional[int]] = mapped_column(BigInteger)
    daily_usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    daily_usage_date: Mapped[Optional[str]] = mapped_column(Text)
