"""
Trusted Clock Guard.

Keeps a persisted anchor holding the highest wall-clock reading ever seen.
Effective time is the anchor, advanced only by later wall-clock readings, so
rolling the device clock back freezes time instead of rewinding it. Expiry
and quota-day decisions are made against this value, never the raw clock.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from wordledger.db.ports import ProgressStore

WallClock = Callable[[], int]


def system_wall_clock_millis() -> int:
    """Raw, untrusted wall clock in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class TrustedClockGuard:
    """
    Monotonic "effective now" backed by the persisted trusted anchor.

    ``observe`` runs inside a caller's transaction so that an expiry or quota
    check and the anchor update it depends on commit as one unit.
    ``effective_now`` wraps a single observation in its own transaction.
    """

    def __init__(self, store: ProgressStore, wall_clock: WallClock = system_wall_clock_millis):
        self._store = store
        self._wall_clock = wall_clock

    def observe(self, tx: Any, observed: int | None = None) -> int:
        """
        Read-then-maybe-advance the anchor within ``tx``.

        Args:
            tx: Open transaction handle from the store
            observed: Wall-clock reading; sampled from the wall clock if None

        Returns:
            Trusted epoch millis (never lower than any earlier result)
        """
        reading = self._wall_clock() if observed is None else observed
        anchor = self._store.get_trusted_anchor(tx)

        if reading > anchor:
            self._store.set_trusted_anchor(reading, tx)
            return reading

        if reading < anchor:
            # Tamper or clock skew: stay at the anchor, never surface an error
            logger.warning(f"Wall clock {reading} behind trusted anchor {anchor}; holding at anchor")
        return anchor

    def effective_now(self, observed: int | None = None) -> int:
        """Observe the clock in a transaction of its own."""
        return self._store.run_in_transaction(lambda tx: self.observe(tx, observed))
