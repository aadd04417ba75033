"""
Exercise Prioritization.

Two orderings over a learner's exercise pool:
- due_for_review: spaced review queue (most urgent first)
- prioritize: free-choice practice, scored by mastery gap, overdue
  reviews and novelty
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime

from loguru import logger

# Score weights
MASTERY_GAP_WEIGHT = 2
OVERDUE_POINTS_PER_DAY = 10
OVERDUE_CAP = 100
NOVELTY_BONUS = 50


@dataclass(frozen=True)
class ExerciseCandidate:
    """Read-only view of an exercise in the learner's pool."""

    id: str
    mastery_level: float  # 0-100
    last_attempt_at: datetime | None = None
    next_review_date: date | None = None

    @property
    def never_attempted(self) -> bool:
        return self.last_attempt_at is None

    def is_due(self, today: date) -> bool:
        """Never scheduled counts as due."""
        return self.next_review_date is None or self.next_review_date <= today


def due_for_review(
    candidates: Sequence[ExerciseCandidate],
    today: date,
    limit: int = 10,
) -> list[str]:
    """
    Get exercise IDs due for spaced review.

    Exercises without a review date sort first; the rest ascend by date.
    Ties keep input order.

    Args:
        candidates: Learner's exercise pool
        today: Reference date
        limit: Maximum IDs to return

    Returns:
        Ordered list of exercise IDs
    """
    due = [c for c in candidates if c.is_due(today)]
    due.sort(key=lambda c: (c.next_review_date is not None, c.next_review_date or date.min))
    return [c.id for c in due[: max(0, limit)]]


def score_candidate(candidate: ExerciseCandidate, today: date) -> float:
    """Practice priority score for a single exercise."""
    score = (100 - candidate.mastery_level) * MASTERY_GAP_WEIGHT

    if candidate.next_review_date is not None and candidate.next_review_date <= today:
        days_overdue = (today - candidate.next_review_date).days
        score += min(days_overdue * OVERDUE_POINTS_PER_DAY, OVERDUE_CAP)

    if candidate.never_attempted:
        score += NOVELTY_BONUS

    return score


def prioritize(candidates: Sequence[ExerciseCandidate], today: date) -> list[str]:
    """
    Rank exercises for free-choice practice.

    Args:
        candidates: Learner's exercise pool
        today: Reference date for overdue computation

    Returns:
        Exercise IDs, highest priority first (stable on ties)
    """
    scored = [(score_candidate(c, today), c.id) for c in candidates]
    # sorted() is stable, so equal scores keep input order
    ranked = sorted(scored, key=lambda item: item[0], reverse=True)

    if ranked:
        logger.debug(f"Prioritized {len(ranked)} exercises, top={ranked[0][1]} ({ranked[0][0]:.0f})")
    return [exercise_id for _, exercise_id in ranked]
