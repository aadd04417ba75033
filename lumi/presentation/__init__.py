"""
Presentation: choosing among content variants for a skill.
"""

from lumi.presentation.selector import (
    LearnerContext,
    PresentationCandidate,
    PresentationChoice,
    PresentationScore,
    PresentationType,
    PriorContext,
    TargetProfile,
    rank_presentations,
    resolve_presentation,
    score_presentation,
    select_best,
    update_presentation_scores,
)

__all__ = [
    "LearnerContext",
    "PresentationCandidate",
    "PresentationChoice",
    "PresentationScore",
    "PresentationType",
    "PriorContext",
    "TargetProfile",
    "rank_presentations",
    "resolve_presentation",
    "score_presentation",
    "select_best",
    "update_presentation_scores",
]
