"""
Unit tests for the Trusted Clock Guard.

Tests:
- Effective time never decreases under wall-clock rollback
- The anchor persists across guard instances
- Observations inside a caller's transaction roll back with it
"""

import pytest

from wordledger.core.clock import TrustedClockGuard


class TestEffectiveNow:
    def test_sequence_never_decreases(self, store):
        guard = TrustedClockGuard(store, wall_clock=lambda: 0)
        outputs = [guard.effective_now(observed) for observed in [100, 50, 200, 30]]
        assert outputs == [100, 100, 200, 200]

    def test_uses_wall_clock_when_no_reading_given(self, clock, wall_clock):
        assert clock.effective_now() == wall_clock.now

    def test_rollback_freezes_time_at_anchor(self, clock, wall_clock):
        first = clock.effective_now()
        wall_clock.rewind(5 * 24 * 60 * 60 * 1000)
        assert clock.effective_now() == first

    def test_resumes_once_wall_clock_passes_anchor(self, clock, wall_clock):
        first = clock.effective_now()
        wall_clock.rewind(1000)
        clock.effective_now()
        wall_clock.advance(3000)
        assert clock.effective_now() == first + 2000

    def test_equal_reading_returns_anchor(self, store):
        guard = TrustedClockGuard(store, wall_clock=lambda: 0)
        assert guard.effective_now(500) == 500
        assert guard.effective_now(500) == 500


class TestAnchorPersistence:
    def test_anchor_created_on_first_read(self, store, clock):
        assert store.run_in_transaction(store.get_trusted_anchor) == 0
        now = clock.effective_now()
        assert store.run_in_transaction(store.get_trusted_anchor) == now

    def test_anchor_survives_new_guard(self, store):
        TrustedClockGuard(store, wall_clock=lambda: 10_000).effective_now()
        fresh = TrustedClockGuard(store, wall_clock=lambda: 1_000)
        assert fresh.effective_now() == 10_000

    def test_observation_rolls_back_with_transaction(self, store):
        guard = TrustedClockGuard(store, wall_clock=lambda: 0)
        guard.effective_now(100)

        def body(tx):
            guard.observe(tx, 900)
            raise RuntimeError("abort")

        with pytest.raises(RuntimeError):
            store.run_in_transaction(body)

        assert store.run_in_transaction(store.get_trusted_anchor) == 100
