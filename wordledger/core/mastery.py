"""
Mastery ladder.

Every item sits on a rung in [MIN_LEVEL, MAX_LEVEL]. KNOWN climbs one rung
and saturates at the top, LATER stays put, AGAIN drops back to the bottom.
Items below the top rung are eligible for the review queue; nothing else
drives scheduling.
"""

from __future__ import annotations

from .outcome import ReviewOutcome

MIN_LEVEL = 0
MAX_LEVEL = 5

_LABELS = {
    0: "New",
    1: "Learning",
    2: "Learning",
    3: "Learning",
    4: "Learning",
    5: "Mastered",
}


def advance(level: int, outcome: ReviewOutcome) -> int:
    """
    Next rung after a review.

    Args:
        level: Current mastery level (0-5)
        outcome: Review outcome

    Returns:
        New mastery level (0-5)
    """
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Mastery level {level} outside [{MIN_LEVEL}, {MAX_LEVEL}]")

    if outcome is ReviewOutcome.KNOWN:
        return min(level + 1, MAX_LEVEL)
    if outcome is ReviewOutcome.AGAIN:
        return MIN_LEVEL
    return level


def is_mastered(level: int) -> bool:
    return level >= MAX_LEVEL


def is_review_eligible(level: int) -> bool:
    """Only items below the top rung re-enter the review queue."""
    return level < MAX_LEVEL


def mastery_label(level: int) -> str:
    return _LABELS.get(level, "Unknown")
