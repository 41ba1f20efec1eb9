"""
Unit tests for the streak law.

Tests:
- Same day, next day and gap classification
- First study day and unparsable dates
- Applying deltas to a running streak
"""

from datetime import date

import pytest

from wordledger.core.streak import StreakDelta, apply_streak, streak_delta, update_streak


class TestStreakDelta:
    def test_same_day_is_none(self):
        assert streak_delta("2026-02-09", "2026-02-09") is StreakDelta.NONE

    def test_next_day_increments(self):
        assert streak_delta("2026-02-09", "2026-02-10") is StreakDelta.INCREMENT

    def test_gap_of_three_days_resets(self):
        assert streak_delta("2026-02-07", "2026-02-10") is StreakDelta.RESET

    def test_gap_of_two_days_resets(self):
        assert streak_delta("2026-02-08", "2026-02-10") is StreakDelta.RESET

    def test_month_boundary_increments(self):
        assert streak_delta("2026-02-28", "2026-03-01") is StreakDelta.INCREMENT

    def test_first_study_day_resets_to_one(self):
        assert streak_delta(None, "2026-02-10") is StreakDelta.RESET
        assert update_streak(0, None, "2026-02-10") == 1

    @pytest.mark.parametrize("last", ["yesterday", "2026/02/09", "2026-13-40", ""])
    def test_unparsable_last_date_resets(self, last):
        assert streak_delta(last, "2026-02-10") is StreakDelta.RESET

    def test_accepts_date_objects(self):
        assert streak_delta(date(2026, 2, 9), date(2026, 2, 10)) is StreakDelta.INCREMENT


class TestApplyStreak:
    def test_none_keeps_streak(self):
        assert apply_streak(4, StreakDelta.NONE) == 4

    def test_increment_adds_one(self):
        assert apply_streak(4, StreakDelta.INCREMENT) == 5

    def test_reset_restarts_at_one(self):
        assert apply_streak(4, StreakDelta.RESET) == 1

    def test_multiple_sessions_same_day_never_double_count(self):
        streak = update_streak(3, "2026-02-09", "2026-02-10")
        streak = update_streak(streak, "2026-02-10", "2026-02-10")
        streak = update_streak(streak, "2026-02-10", "2026-02-10")
        assert streak == 4
