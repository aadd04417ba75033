"""
Unit tests for the SM-2 scheduler.

Run: pytest tests/unit/test_sm2_scheduler.py -v
"""

import random
from datetime import date, timedelta

import pytest

from lumi.core.errors import InvalidInputError
from lumi.review.scheduler import ReviewState, SM2Config, SM2Scheduler, next_review


@pytest.fixture
def scheduler():
    return SM2Scheduler()


class TestFirstReviews:
    """Test the fixed first and second intervals."""

    def test_new_state_defaults(self, scheduler, today):
        state = scheduler.next_review(None, 4, today)
        assert state.interval == 1
        assert state.repetitions == 1
        assert state.next_review_date == today + timedelta(days=1)

    def test_canonical_sequence(self, scheduler, today):
        """Three quality-4 answers give 1, 6, 15 days."""
        state = None
        intervals = []
        for _ in range(3):
            state = scheduler.next_review(state, 4, today)
            intervals.append(state.interval)
        assert intervals == [1, 6, 15]
        assert state.repetitions == 3

    def test_quality_4_keeps_ease(self, scheduler, today):
        state = scheduler.next_review(None, 4, today)
        assert state.ease_factor == pytest.approx(2.5)

    def test_quality_5_raises_ease(self, scheduler, today):
        state = scheduler.next_review(None, 5, today)
        assert state.ease_factor == pytest.approx(2.6)

    def test_interval_uses_prior_ease(self, scheduler, today):
        """Third interval multiplies by the ease factor before this update."""
        state = ReviewState(interval=6, ease_factor=2.6, repetitions=2, next_review_date=today)
        new = scheduler.next_review(state, 3, today)
        assert new.interval == 16  # round(6 * 2.6) = 15.6 -> 16
        assert new.ease_factor == pytest.approx(2.46)

    def test_rounds_half_up(self, scheduler, today):
        state = ReviewState(interval=5, ease_factor=2.5, repetitions=2, next_review_date=today)
        assert scheduler.next_review(state, 4, today).interval == 13  # 12.5 -> 13


class TestForgetting:
    """Test the reset on failed recall."""

    @pytest.mark.parametrize("quality", [0, 1, 2])
    def test_failure_resets(self, scheduler, today, quality):
        state = ReviewState(interval=40, ease_factor=2.2, repetitions=6, next_review_date=today)
        new = scheduler.next_review(state, quality, today)
        assert new.repetitions == 0
        assert new.interval == 1
        assert new.next_review_date == today + timedelta(days=1)

    def test_failure_still_updates_ease(self, scheduler, today):
        state = ReviewState(interval=10, ease_factor=2.5, repetitions=3, next_review_date=today)
        assert scheduler.next_review(state, 0, today).ease_factor == pytest.approx(1.7)


class TestInvariants:
    """Test bounds that must hold for any quality sequence."""

    def test_ease_floor(self, scheduler, today):
        state = None
        for _ in range(10):
            state = scheduler.next_review(state, 0, today)
        assert state.ease_factor == pytest.approx(1.3)

    def test_random_sequences_stay_in_bounds(self, scheduler, today):
        rng = random.Random(7)
        for _ in range(50):
            state = None
            for _ in range(40):
                state = scheduler.next_review(state, rng.randint(0, 5), today)
                assert state.ease_factor >= 1.3
                assert 1 <= state.interval <= 365

    def test_interval_capped(self, scheduler, today):
        state = ReviewState(interval=300, ease_factor=2.5, repetitions=8, next_review_date=today)
        new = scheduler.next_review(state, 5, today)
        assert new.interval == 365
        assert new.next_review_date == today + timedelta(days=365)

    @pytest.mark.parametrize("quality", [-1, 6, 2.9, 3.5, None, "x", "4"])
    def test_invalid_quality(self, scheduler, today, quality):
        with pytest.raises(InvalidInputError):
            scheduler.next_review(None, quality, today)

    def test_whole_float_quality_accepted(self, scheduler, today):
        assert scheduler.next_review(None, 4.0, today) == scheduler.next_review(None, 4, today)


class TestReviewState:
    """Test ReviewState helpers."""

    def test_is_due(self):
        state = ReviewState(1, 2.5, 1, date(2024, 3, 10))
        assert state.is_due(date(2024, 3, 10))
        assert not state.is_due(date(2024, 3, 9))

    def test_days_overdue(self):
        state = ReviewState(1, 2.5, 1, date(2024, 3, 10))
        assert state.days_overdue(date(2024, 3, 13)) == 3
        assert state.days_overdue(date(2024, 3, 1)) == 0


def test_custom_config(today):
    scheduler = SM2Scheduler(SM2Config(first_interval=2, second_interval=4))
    state = scheduler.next_review(None, 4, today)
    assert state.interval == 2
    assert scheduler.next_review(state, 4, today).interval == 4


def test_module_shortcut(today):
    assert next_review(None, 5, today).interval == 1
