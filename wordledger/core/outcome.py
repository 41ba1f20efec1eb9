"""
Review outcomes.

The three self-assessment buttons of a flashcard review. Outcomes are stored
as small integers; ``from_value`` is the decode table for persisted values.
"""

from __future__ import annotations

from enum import IntEnum

from loguru import logger


class ReviewOutcome(IntEnum):
    """Learner's verdict on a single review."""

    AGAIN = 0  # did not know it
    LATER = 1  # partial recall, keep in rotation
    KNOWN = 2  # knew it

    @classmethod
    def from_value(cls, value: int) -> ReviewOutcome:
        """
        Decode a persisted integer.

        Unknown integers decode to LATER, the only outcome that leaves the
        mastery level untouched, and are logged rather than raised.
        """
        outcome = _DECODE_TABLE.get(value)
        if outcome is None:
            logger.warning(f"Undecodable review outcome {value!r}; treating as LATER")
            return cls.LATER
        return outcome

    @classmethod
    def parse(cls, text: str) -> ReviewOutcome:
        """Parse a name (``known``) or integer string (``2``) typed by a user."""
        cleaned = text.strip()
        if cleaned.isdigit() and int(cleaned) in _DECODE_TABLE:
            return _DECODE_TABLE[int(cleaned)]
        try:
            return cls[cleaned.upper()]
        except KeyError:
            choices = ", ".join(o.name.lower() for o in cls)
            raise ValueError(f"Unknown outcome {text!r} (expected one of: {choices})") from None


_DECODE_TABLE: dict[int, ReviewOutcome] = {o.value: o for o in ReviewOutcome}
