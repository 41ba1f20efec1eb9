"""Exceptions raised by the progress core."""

from __future__ import annotations


class WordLedgerError(Exception):
    """Base class for every error raised by wordledger."""


class TransactionFailure(WordLedgerError):
    """A persistence transaction failed and was rolled back."""


class ItemNotFound(WordLedgerError):
    """A review referenced an item that is not in the corpus."""

    def __init__(self, item_id: int):
        super().__init__(f"Item {item_id} does not exist")
        self.item_id = item_id


class UnknownLevel(WordLedgerError):
    """An unlock referenced a level that is not in the corpus."""

    def __init__(self, level_id: int):
        super().__init__(f"Level {level_id} does not exist")
        self.level_id = level_id


class CorpusError(WordLedgerError):
    """A corpus seed document could not be read or validated."""
