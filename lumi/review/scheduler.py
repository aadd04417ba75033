"""
SM-2 Spaced Repetition Scheduler.

Decides when a previously seen exercise should resurface. Each exercise a
learner has attempted carries a ReviewState:
- Ease Factor (EF): how fast intervals grow (2.5 default, min 1.3)
- Interval: days until next review (1-365)
- Repetitions: consecutive successful recalls

Forgetting (quality < 3) resets progress entirely; there is no partial credit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

from loguru import logger

from lumi.review.quality import AnswerQuality

# =============================================================================
# Review State
# =============================================================================


@dataclass(frozen=True)
class SM2Config:
    """Configuration for the SM-2 algorithm."""

    initial_easiness: float = 2.5
    minimum_easiness: float = 1.3
    first_interval: int = 1  # Days for first review
    second_interval: int = 6  # Days for second review
    minimum_interval: int = 1
    maximum_interval: int = 365


DEFAULT_SM2_CONFIG = SM2Config()


@dataclass(frozen=True)
class ReviewState:
    """SM-2 state for one exercise of one learner."""

    interval: int
    ease_factor: float
    repetitions: int
    next_review_date: date

    def is_due(self, today: date) -> bool:
        """Check if the exercise is due for review."""
        return today >= self.next_review_date

    def days_overdue(self, today: date) -> int:
        """Days past the scheduled review date."""
        return max(0, (today - self.next_review_date).days)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# =============================================================================
# Scheduler
# =============================================================================


class SM2Scheduler:
    """
    Implements the SM-2 spaced repetition algorithm.

    The scheduler is stateless: it maps (prior state, quality, today) to a
    new ReviewState and never touches storage.
    """

    def __init__(self, config: SM2Config | None = None):
        """
        Initialize SM-2 scheduler.

        Args:
            config: Custom configuration (uses defaults if None)
        """
        self.config = config or DEFAULT_SM2_CONFIG

    def initial_state(self, today: date) -> ReviewState:
        """State used for an exercise that has never been reviewed."""
        return ReviewState(
            interval=self.config.minimum_interval,
            ease_factor=self.config.initial_easiness,
            repetitions=0,
            next_review_date=today,
        )

    def next_review(
        self,
        state: ReviewState | None,
        quality: int,
        today: date,
    ) -> ReviewState:
        """
        Calculate the next review state for an attempt.

        Args:
            state: Current state (None for a first attempt)
            quality: Answer quality (0-5)
            today: Date the attempt happened

        Returns:
            New ReviewState with interval and next_review_date

        Raises:
            InvalidInputError: If quality is outside 0-5
        """
        quality = AnswerQuality.coerce(quality)
        if state is None:
            state = self.initial_state(today)

        interval = state.interval
        repetitions = state.repetitions

        if quality < AnswerQuality.CORRECT_HARD:
            # Failed - reset to beginning
            repetitions = 0
            interval = self.config.minimum_interval
        else:
            if repetitions == 0:
                interval = self.config.first_interval
            elif repetitions == 1:
                interval = self.config.second_interval
            else:
                interval = _round_half_up(interval * state.ease_factor)
            repetitions += 1

        # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        miss = 5 - int(quality)
        ease_factor = state.ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
        ease_factor = max(self.config.minimum_easiness, ease_factor)

        interval = min(self.config.maximum_interval, max(self.config.minimum_interval, interval))

        new_state = ReviewState(
            interval=interval,
            ease_factor=ease_factor,
            repetitions=repetitions,
            next_review_date=today + timedelta(days=interval),
        )

        logger.debug(
            f"SM-2 q={int(quality)}: interval {state.interval}->{interval}d, "
            f"EF {state.ease_factor:.2f}->{ease_factor:.2f}, reps={repetitions}"
        )
        return new_state


_default_scheduler = SM2Scheduler()


def next_review(state: ReviewState | None, quality: int, today: date) -> ReviewState:
    """Module-level shortcut using the default SM-2 configuration."""
    return _default_scheduler.next_review(state, quality, today)
