"""
Presentation Selection.

Scores interchangeable content variants for the same skill against a
learner profile and picks the best fit. Every rule that contributes to a
score leaves a short human-readable reason so the choice can be explained.

Scoring:
- Age range containment: +30
- Learning style match: +25
- Shared interests: +20 each
- Preferred pedagogical approach: +20
- Historical engagement: engagement x 3, max +15
- Historical effectiveness: effectiveness x 2, max +10
- Duration fit: +10 within 5 min, -10 beyond 15 min
- Energy fit: +5 (low -> direct, high -> game/discovery)
- Seen last time: -20
- Default variant with a weak score (< 20): +15
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum

from loguru import logger

# =============================================================================
# Constants
# =============================================================================

AGE_MATCH_POINTS = 30
LEARNING_STYLE_POINTS = 25
INTEREST_POINTS = 20
METHOD_POINTS = 20
ENGAGEMENT_MULTIPLIER = 3
ENGAGEMENT_CAP = 15
EFFECTIVENESS_MULTIPLIER = 2
EFFECTIVENESS_CAP = 10
DURATION_FIT_MINUTES = 5
DURATION_MISFIT_MINUTES = 15
DURATION_POINTS = 10
ENERGY_POINTS = 5
REPETITION_PENALTY = 20
DEFAULT_RESCUE_BELOW = 20
DEFAULT_RESCUE_POINTS = 15

DEFAULT_FIT_THRESHOLD = 30.0
SCORE_HISTORY_WEIGHT = 0.7  # Weight kept by the old score on feedback


class PresentationType(str, Enum):
    """Narrative format of a presentation."""

    STORY = "story"
    DIRECT = "direct"
    DISCOVERY = "discovery"
    GAME = "game"
    PROJECT = "project"
    DIALOGUE = "dialogue"


HIGH_ENERGY_TYPES = (PresentationType.GAME, PresentationType.DISCOVERY)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class TargetProfile:
    """Learner profile a presentation was written for."""

    age_range: tuple[int, int] | None = None
    learning_style: str | None = None
    interests: tuple[str, ...] = ()
    level: str | None = None  # beginner, intermediate, advanced
    energy: str | None = None  # low, medium, high


@dataclass(frozen=True)
class PresentationCandidate:
    """One content variant for teaching a skill."""

    id: str
    target_profile: TargetProfile = field(default_factory=TargetProfile)
    presentation_type: PresentationType = PresentationType.DIRECT
    pedagogical_approach: str | None = None
    estimated_duration_minutes: float = 10
    engagement_score: float = 0.0
    effectiveness_score: float = 0.0
    is_default: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class LearnerContext:
    """What we know about the learner right now."""

    age: int
    learning_style: str | None = None
    interests: frozenset[str] = frozenset()
    preferred_method: str | None = None
    energy_level: str | None = None  # low, medium, high
    time_available_minutes: float | None = None
    last_presentation_id: str | None = None


@dataclass(frozen=True)
class PriorContext:
    """History of previous presentation attempts for this skill."""

    last_presentation_id: str | None = None
    previous_attempts: int = 0


@dataclass
class PresentationScore:
    """A scored candidate with the reasons behind its score."""

    candidate: PresentationCandidate
    score: float
    reasons: list[str] = field(default_factory=list)


@dataclass
class PresentationChoice:
    """Outcome of resolving which presentation to show."""

    candidate: PresentationCandidate
    score: float
    reasons: list[str]
    is_new: bool = False


# =============================================================================
# Scoring
# =============================================================================


def score_presentation(
    candidate: PresentationCandidate,
    context: LearnerContext,
    last_presentation_id: str | None = None,
) -> PresentationScore:
    """
    Score one candidate against a learner context.

    Args:
        candidate: Presentation to score
        context: Current learner context
        last_presentation_id: Presentation shown last time, if any

    Returns:
        PresentationScore with accumulated reasons
    """
    score = 0.0
    reasons: list[str] = []
    target = candidate.target_profile

    if target.age_range is not None:
        min_age, max_age = target.age_range
        if min_age <= context.age <= max_age:
            score += AGE_MATCH_POINTS
            reasons.append("age match")

    if target.learning_style and context.learning_style:
        if target.learning_style == context.learning_style:
            score += LEARNING_STYLE_POINTS
            reasons.append("learning style match")

    shared = [interest for interest in target.interests if interest in context.interests]
    if shared:
        score += len(shared) * INTEREST_POINTS
        reasons.append(f"{len(shared)} shared interest(s)")

    if context.preferred_method and candidate.pedagogical_approach == context.preferred_method:
        score += METHOD_POINTS
        reasons.append("preferred teaching method")

    if candidate.engagement_score > 0:
        score += min(candidate.engagement_score * ENGAGEMENT_MULTIPLIER, ENGAGEMENT_CAP)
        reasons.append("good engagement history")

    if candidate.effectiveness_score > 0:
        score += min(candidate.effectiveness_score * EFFECTIVENESS_MULTIPLIER, EFFECTIVENESS_CAP)
        reasons.append("proven effectiveness")

    if context.time_available_minutes:
        duration_diff = abs(candidate.estimated_duration_minutes - context.time_available_minutes)
        if duration_diff <= DURATION_FIT_MINUTES:
            score += DURATION_POINTS
            reasons.append("fits available time")
        elif duration_diff > DURATION_MISFIT_MINUTES:
            score -= DURATION_POINTS
            reasons.append("duration mismatch")

    if context.energy_level == "low":
        if candidate.presentation_type == PresentationType.DIRECT:
            score += ENERGY_POINTS
            reasons.append("suits low energy")
    elif context.energy_level == "high":
        if candidate.presentation_type in HIGH_ENERGY_TYPES:
            score += ENERGY_POINTS
            reasons.append("suits high energy")

    if last_presentation_id is not None and candidate.id == last_presentation_id:
        score -= REPETITION_PENALTY
        reasons.append("seen recently")

    if candidate.is_default and score < DEFAULT_RESCUE_BELOW:
        score += DEFAULT_RESCUE_POINTS
        reasons.append("default presentation")

    return PresentationScore(candidate=candidate, score=score, reasons=reasons)


def rank_presentations(
    candidates: Sequence[PresentationCandidate],
    context: LearnerContext,
    prior_context: PriorContext | None = None,
) -> list[PresentationScore]:
    """
    Score every active candidate, best first.

    Ties keep input order.
    """
    last_id = prior_context.last_presentation_id if prior_context else context.last_presentation_id
    scored = [
        score_presentation(candidate, context, last_id)
        for candidate in candidates
        if candidate.is_active
    ]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored


def select_best(
    candidates: Sequence[PresentationCandidate],
    context: LearnerContext,
    prior_context: PriorContext | None = None,
) -> PresentationScore | None:
    """
    Pick the best-fit presentation.

    Callers are responsible for recording the chosen id as the learner's
    new last_presentation_id.

    Args:
        candidates: Available presentations for the skill
        context: Current learner context
        prior_context: Previous attempt history (overrides
            context.last_presentation_id when given)

    Returns:
        Top PresentationScore, or None if no candidate is active
    """
    ranked = rank_presentations(candidates, context, prior_context)
    if not ranked:
        return None

    best = ranked[0]
    logger.debug(
        f"Selected presentation {best.candidate.id} (score={best.score:.1f}, "
        f"reasons={best.reasons}) out of {len(ranked)}"
    )
    return best


def resolve_presentation(
    candidates: Sequence[PresentationCandidate],
    context: LearnerContext,
    prior_context: PriorContext | None = None,
    generate: Callable[[LearnerContext], PresentationCandidate | None] | None = None,
    fit_threshold: float = DEFAULT_FIT_THRESHOLD,
) -> PresentationChoice | None:
    """
    Decide between an existing presentation and a freshly generated one.

    An existing presentation is used when its score beats fit_threshold.
    Otherwise the generate callable (the content-generation collaborator)
    is asked for a new variant; if it produces nothing, the best-ranked default
    presentation is used, then the best-scoring one.

    Returns:
        PresentationChoice, or None when nothing is available at all
    """
    ranked = rank_presentations(candidates, context, prior_context)
    best = ranked[0] if ranked else None
    if best is not None and best.score > fit_threshold:
        logger.debug(f"Existing presentation {best.candidate.id} fits (score={best.score:.1f})")
        return PresentationChoice(best.candidate, best.score, best.reasons)

    if generate is not None:
        generated = generate(context)
        if generated is not None:
            logger.info(f"Using generated presentation {generated.id}")
            scored = score_presentation(generated, context)
            return PresentationChoice(generated, scored.score, scored.reasons, is_new=True)

    # First default in rank order, repetition penalty included
    for scored in ranked:
        if scored.candidate.is_default:
            return PresentationChoice(scored.candidate, scored.score, scored.reasons)

    if best is not None:
        return PresentationChoice(best.candidate, best.score, best.reasons)
    return None


def update_presentation_scores(
    candidate: PresentationCandidate,
    engagement: float,
    effectiveness: float,
) -> PresentationCandidate:
    """
    Blend fresh feedback into a presentation's historical scores.

    new = old * 0.7 + observed * 0.3
    """
    keep = SCORE_HISTORY_WEIGHT
    return replace(
        candidate,
        engagement_score=candidate.engagement_score * keep + engagement * (1 - keep),
        effectiveness_score=candidate.effectiveness_score * keep + effectiveness * (1 - keep),
    )
