"""
Unit tests for XP progression.

Run: pytest tests/unit/test_progression.py -v
"""

from datetime import timedelta

import pytest

from lumi.core.errors import InvalidInputError
from lumi.gamification.progression import (
    LEVEL_THRESHOLDS,
    ProgressionState,
    add_xp,
    cumulative_xp_for_level,
    level_for_total_xp,
    xp_for_level,
    xp_status,
)


class TestLevelTable:
    """Test threshold helpers."""

    def test_table_non_decreasing(self):
        assert list(LEVEL_THRESHOLDS) == sorted(LEVEL_THRESHOLDS)

    def test_xp_for_level(self):
        assert xp_for_level(1) == 100
        assert xp_for_level(20) == 6000
        assert xp_for_level(35) == 6000
        assert xp_for_level(0) == 0

    def test_cumulative(self):
        assert cumulative_xp_for_level(1) == 0
        assert cumulative_xp_for_level(2) == 100
        assert cumulative_xp_for_level(4) == 450

    @pytest.mark.parametrize("total,level", [(0, 1), (99, 1), (100, 2), (249, 2), (250, 3), (450, 4)])
    def test_level_for_total(self, total, level):
        assert level_for_total_xp(total) == level


class TestAddXp:
    """Test add_xp."""

    def test_fresh_state(self, today):
        award = add_xp(None, 30, today)
        assert award.state.total_xp == 30
        assert award.state.current_level == 1
        assert award.state.xp_to_next_level == 70
        assert award.state.xp_earned_today == 30
        assert not award.level_up

    def test_exactly_one_level_up_at_boundary(self, today):
        state = None
        flags = []
        for amount in (40, 40, 20, 10):
            award = add_xp(state, amount, today)
            state = award.state
            flags.append(award.level_up)
        assert flags == [False, False, True, False]
        assert state.current_level == 2
        assert state.xp_to_next_level == 140

    def test_multiple_levels_in_one_award(self, today):
        award = add_xp(None, 460, today)
        assert award.level_up
        assert award.previous_level == 1
        assert award.state.current_level == 4
        assert award.levels_gained == 3
        assert award.state.xp_to_next_level == 290

    def test_current_level_matches_cumulative(self, today):
        state = None
        for _ in range(60):
            state = add_xp(state, 137, today).state
            assert state.current_level == level_for_total_xp(state.total_xp)

    def test_beyond_table(self, today):
        total = cumulative_xp_for_level(21)
        state = ProgressionState(total - 1, 20, 1, 0, today)
        award = add_xp(state, 6001, today)
        assert award.state.current_level == 22
        assert award.state.xp_to_next_level == 6000

    def test_daily_counter_resets(self, today):
        state = add_xp(None, 30, today).state
        state = add_xp(state, 20, today).state
        assert state.xp_earned_today == 50
        state = add_xp(state, 5, today + timedelta(days=1)).state
        assert state.xp_earned_today == 5
        assert state.last_xp_date == today + timedelta(days=1)

    def test_zero_accepted(self, today):
        award = add_xp(None, 0, today)
        assert award.state.total_xp == 0
        assert award.state.xp_to_next_level == 100

    def test_negative_rejected(self, today):
        with pytest.raises(InvalidInputError):
            add_xp(None, -10, today)


class TestXpStatus:
    """Test progress summary."""

    def test_no_state(self):
        status = xp_status(None)
        assert (status.current_level, status.xp_to_next_level, status.progress_percent) == (1, 100, 0)

    def test_progress_percent(self, today):
        state = add_xp(None, 175, today).state  # level 2, 75 of 150
        assert xp_status(state).progress_percent == 50

    def test_progress_rounds_half_up(self, today):
        state = add_xp(None, 251, today).state  # level 3, 1 of 200 = 0.5%
        assert xp_status(state).progress_percent == 1
