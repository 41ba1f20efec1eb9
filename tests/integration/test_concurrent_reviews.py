"""
Integration tests for concurrent writers on a file-backed database.

Tests:
- Concurrent reviews of one item never lose a mastery transition
- Concurrent quota consumption never exceeds the daily limit
- The trusted anchor only moves forward under racing readers
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from tests.conftest import BASE_MILLIS
from wordledger.core.clock import TrustedClockGuard
from wordledger.core.outcome import ReviewOutcome

pytestmark = pytest.mark.slow


def run_concurrently(fn, count):
    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(lambda _: fn(), range(count)))


class TestConcurrentReviews:
    def test_no_lost_mastery_update(self, ledger, seeded_store, item_mastery):
        run_concurrently(lambda: ledger.record(1, ReviewOutcome.KNOWN), 4)

        assert item_mastery(1) == 4
        assert seeded_store.run_in_transaction(lambda tx: seeded_store.count_study_records(tx, 1)) == 4

    def test_daily_counters_count_every_review(self, ledger):
        run_concurrently(lambda: ledger.record(2, ReviewOutcome.LATER), 6)

        stats = ledger.user_stats()
        assert stats.today_review_count == 6
        assert stats.streak_days == 1


class TestConcurrentGates:
    def test_quota_never_overspent(self, quota):
        results = run_concurrently(lambda: quota.consume_daily_quota(False), 8)

        assert results.count(True) == 3
        assert quota.today_quota_usage() == 3

    def test_anchor_keeps_highest_reading(self, seeded_store):
        readings = [BASE_MILLIS + offset for offset in (500, 100, 900, 300, 700)]
        guards = [TrustedClockGuard(seeded_store, wall_clock=lambda r=r: r) for r in readings]

        with ThreadPoolExecutor(max_workers=len(guards)) as pool:
            list(pool.map(lambda guard: guard.effective_now(), guards))

        assert seeded_store.run_in_transaction(seeded_store.get_trusted_anchor) == BASE_MILLIS + 900
