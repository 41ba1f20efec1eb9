"""
Core rules of the progress ledger.

Pure functions (mastery ladder, streak law) plus the trusted clock guard.
"""

from wordledger.core.clock import TrustedClockGuard, system_wall_clock_millis
from wordledger.core.exceptions import (
    CorpusError,
    ItemNotFound,
    TransactionFailure,
    UnknownLevel,
    WordLedgerError,
)
from wordledger.core.mastery import MAX_LEVEL, MIN_LEVEL, advance, is_mastered, is_review_eligible
from wordledger.core.models import Item, Level, LevelProgress, StudyRecord, UnlockState, UserStats
from wordledger.core.outcome import ReviewOutcome
from wordledger.core.streak import StreakDelta, apply_streak, streak_delta

__all__ = [
    "MAX_LEVEL",
    "MIN_LEVEL",
    "advance",
    "is_mastered",
    "is_review_eligible",
    "ReviewOutcome",
    "StreakDelta",
    "streak_delta",
    "apply_streak",
    "TrustedClockGuard",
    "system_wall_clock_millis",
    "Item",
    "Level",
    "LevelProgress",
    "StudyRecord",
    "UnlockState",
    "UserStats",
    "WordLedgerError",
    "TransactionFailure",
    "ItemNotFound",
    "UnknownLevel",
    "CorpusError",
]
