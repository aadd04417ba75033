"""
Review: spaced repetition for previously seen exercises.

Components:
- estimate_quality: attempt outcome -> 0-5 quality
- SM2Scheduler: quality + prior state -> next review interval
- due_for_review / prioritize: ordering of a learner's exercise pool
"""

from lumi.review.prioritizer import (
    ExerciseCandidate,
    due_for_review,
    prioritize,
    score_candidate,
)
from lumi.review.quality import AnswerQuality, QualityConfig, estimate_quality
from lumi.review.scheduler import ReviewState, SM2Config, SM2Scheduler, next_review

__all__ = [
    # Quality
    "AnswerQuality",
    "QualityConfig",
    "estimate_quality",
    # Scheduling
    "ReviewState",
    "SM2Config",
    "SM2Scheduler",
    "next_review",
    # Prioritization
    "ExerciseCandidate",
    "due_for_review",
    "prioritize",
    "score_candidate",
]
