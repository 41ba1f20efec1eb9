"""
Unlock/Quota Manager.

Two kinds of gate, both evaluated against trusted time:

- Level unlocks: LOCKED -> UNLOCKED(expiry?). A free user unlocks a unit for
  a few hours (e.g. after watching an ad); a purchase unlocks it for good.
  Top-level levels and premium users are never gated.
- Daily free-tier quota: a usage counter that restarts when the trusted
  calendar day moves past the day it was last reset.

The clock observation, the day rollover and the check run in one
transaction, so racing two clock reads cannot reopen a spent quota.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timezone, tzinfo
from typing import Any

from loguru import logger

from wordledger.core.clock import TrustedClockGuard
from wordledger.core.dates import day_string
from wordledger.core.exceptions import UnknownLevel
from wordledger.core.models import UnlockState
from wordledger.db.ports import ProgressStore

LEVEL_GATE_PREFIX = "level:"
DAILY_REVIEW_GATE = "daily_review"

MILLIS_PER_HOUR = 60 * 60 * 1000


def level_gate(level_id: int) -> str:
    return f"{LEVEL_GATE_PREFIX}{level_id}"


class UnlockQuotaManager:
    """
    Gates time-limited level unlocks and the free-tier daily quota.

    The quota meters its own counter on the gate row and never reads
    ``UserStats.today_review_count``. That counter belongs to the ledger. It
    counts premium reviews too and only rolls over when the next review lands.
    """

    def __init__(
        self,
        store: ProgressStore,
        clock: TrustedClockGuard,
        daily_limit: int = 10,
        unlock_duration_hours: int = 3,
        tz: tzinfo = timezone.utc,
    ):
        self._store = store
        self._clock = clock
        self.daily_limit = daily_limit
        self.unlock_duration_hours = unlock_duration_hours
        self._tz = tz

    # ========================================
    # Level unlocks
    # ========================================

    def is_level_unlocked(self, level_id: int, is_premium: bool = False) -> bool:
        """UNLOCKED and (no expiry or trusted now < expiry)."""
        if is_premium:
            return True

        def body(tx: Any) -> bool:
            level = self._store.get_level(level_id, tx)
            if level is not None and level.is_parent:
                return True
            now = self._clock.observe(tx)
            return self._store.get_unlock_state(level_gate(level_id), tx).is_unlocked_at(now)

        return self._store.run_in_transaction(body)

    def unlock_level(
        self,
        level_id: int,
        duration_hours: int | None = None,
        permanent: bool = False,
    ) -> UnlockState:
        """
        Unlock a level until trusted now + duration, or for good.

        A permanent unlock is never shortened by a later timed one.

        Raises:
            UnknownLevel: If the level does not exist
        """
        hours = duration_hours if duration_hours is not None else self.unlock_duration_hours

        def body(tx: Any) -> UnlockState:
            if self._store.get_level(level_id, tx) is None:
                raise UnknownLevel(level_id)
            now = self._clock.observe(tx)
            state = self._store.get_unlock_state(level_gate(level_id), tx)

            if permanent or (state.unlocked and state.expiry_millis is None):
                expiry = None
            else:
                expiry = now + hours * MILLIS_PER_HOUR

            state = replace(state, unlocked=True, expiry_millis=expiry)
            self._store.update_unlock_state(state, tx)
            return state

        state = self._store.run_in_transaction(body)
        if state.expiry_millis is None:
            logger.info(f"Level {level_id} unlocked permanently")
        else:
            logger.info(f"Level {level_id} unlocked until {state.expiry_millis}")
        return state

    def remaining_unlock_millis(self, level_id: int) -> int:
        """Milliseconds left on a timed unlock; 0 when locked, expired or permanent."""

        def body(tx: Any) -> int:
            now = self._clock.observe(tx)
            return self._store.get_unlock_state(level_gate(level_id), tx).remaining_millis(now)

        return self._store.run_in_transaction(body)

    def unlocked_level_ids(self) -> set[int]:
        """Batch variant of ``is_level_unlocked`` for explicitly unlocked levels."""

        def body(tx: Any) -> set[int]:
            now = self._clock.observe(tx)
            return {
                int(state.gate_key[len(LEVEL_GATE_PREFIX):])
                for state in self._store.list_unlock_states(tx)
                if state.gate_key.startswith(LEVEL_GATE_PREFIX) and state.is_unlocked_at(now)
            }

        return self._store.run_in_transaction(body)

    # ========================================
    # Daily quota
    # ========================================

    def _rolled_over(self, tx: Any, gate_key: str) -> UnlockState:
        """Gate state with the usage counter reset if the trusted day moved on."""
        today = day_string(self._clock.observe(tx), self._tz)
        state = self._store.get_unlock_state(gate_key, tx)
        if state.daily_usage_date != today:
            state = replace(state, daily_usage_count=0, daily_usage_date=today)
            self._store.update_unlock_state(state, tx)
        return state

    def consume_daily_quota(self, is_premium: bool, gate_key: str = DAILY_REVIEW_GATE) -> bool:
        """
        Take one unit of today's quota.

        Returns:
            True for premium users, True for free users while under the
            limit (the counter is incremented), False once it is spent.
        """
        if is_premium:
            return True

        def body(tx: Any) -> bool:
            state = self._rolled_over(tx, gate_key)
            if state.daily_usage_count >= self.daily_limit:
                return False
            self._store.update_unlock_state(
                replace(state, daily_usage_count=state.daily_usage_count + 1), tx
            )
            return True

        allowed = self._store.run_in_transaction(body)
        if not allowed:
            logger.info(f"Daily quota '{gate_key}' exhausted ({self.daily_limit})")
        return allowed

    def today_quota_usage(self, gate_key: str = DAILY_REVIEW_GATE) -> int:
        return self._store.run_in_transaction(
            lambda tx: self._rolled_over(tx, gate_key).daily_usage_count
        )

    def remaining_daily_quota(
        self, is_premium: bool, gate_key: str = DAILY_REVIEW_GATE
    ) -> int | None:
        """Units left today; None means unlimited."""
        if is_premium:
            return None
        return max(self.daily_limit - self.today_quota_usage(gate_key), 0)
