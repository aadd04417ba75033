"""
Learner Service.

Runs the load-state / compute / save-state cycle for each learner action.
Every action that writes runs inside a single StateStore transaction, so
concurrent submissions for the same learner cannot lose an update.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime

from loguru import logger

from lumi.config import Settings, get_settings
from lumi.delivery.state_store import LeaderboardEntry, StateStore
from lumi.emotion.engine import DetectedEmotion, EmotionRule, LearnerSignals, detect_emotion
from lumi.gamification.progression import XpAward, XpStatus, add_xp, xp_status
from lumi.gamification.streaks import (
    FreezeResult,
    StreakStatus,
    StreakUpdate,
    earn_streak_freeze,
    streak_status,
    update_streak,
    use_streak_freeze,
)
from lumi.presentation.selector import (
    LearnerContext,
    PresentationCandidate,
    PresentationChoice,
    PriorContext,
    resolve_presentation,
)
from lumi.review.prioritizer import due_for_review, prioritize
from lumi.review.quality import AnswerQuality, estimate_quality
from lumi.review.scheduler import ReviewState, SM2Scheduler

XP_SOURCE_CORRECT_ANSWER = "correct_answer"


@dataclass
class AnswerOutcome:
    """Everything that changed after one answer."""

    exercise_id: str
    quality: AnswerQuality
    review_state: ReviewState
    mastery_level: float
    streak: StreakUpdate
    xp: XpAward | None = None


@dataclass
class ProgressSummary:
    xp: XpStatus
    streak: StreakStatus


class LearnerService:
    """
    Stateful facade over the pure decision components.

    Args:
        store: Persistence backend
        settings: Runtime settings (defaults to get_settings())
        scheduler: SM-2 scheduler
        emotion_rules: Configured emotion rules snapshot
        presentations: Presentation variants by skill id
        clock: Returns "today"; injectable for tests
        now: Returns the wall-clock time used for log timestamps
    """

    def __init__(
        self,
        store: StateStore,
        settings: Settings | None = None,
        scheduler: SM2Scheduler | None = None,
        emotion_rules: Sequence[EmotionRule] = (),
        presentations: dict[str, list[PresentationCandidate]] | None = None,
        clock: Callable[[], date] = date.today,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.scheduler = scheduler or SM2Scheduler()
        self.emotion_rules = tuple(emotion_rules)
        self.presentations = presentations or {}
        self.clock = clock
        self.now = now

    def _stamp(self, today: date) -> datetime:
        """Timestamp on the action date at the current time of day."""
        return datetime.combine(today, self.now().time())

    # =========================================================================
    # Review
    # =========================================================================

    def record_answer(
        self,
        learner_id: str,
        exercise_id: str,
        is_correct: bool,
        time_spent_ms: int,
        hints_used: int = 0,
        today: date | None = None,
    ) -> AnswerOutcome:
        """
        Process one answer.

        Estimates quality, advances the SM-2 schedule, updates attempt
        counts, records daily activity and awards XP for correct answers.
        """
        today = today or self.clock()
        quality = estimate_quality(is_correct, time_spent_ms, hints_used)

        with self.store.transaction():
            prior = self.store.get_review_state(learner_id, exercise_id)
            review_state = self.scheduler.next_review(prior, quality, today)
            self.store.save_review_state(learner_id, exercise_id, review_state)

            progress = self.store.record_attempt(learner_id, exercise_id, is_correct, self._stamp(today))

            streak = update_streak(self.store.get_streak(learner_id), today)
            self.store.save_streak(learner_id, streak.state)

            award = None
            if is_correct:
                award = self._award(learner_id, self.settings.xp_per_correct_answer, XP_SOURCE_CORRECT_ANSWER, today)

        logger.info(
            f"{learner_id} answered {exercise_id}: q={int(quality)}, "
            f"next review {review_state.next_review_date}"
        )
        return AnswerOutcome(
            exercise_id=exercise_id,
            quality=quality,
            review_state=review_state,
            mastery_level=progress.mastery_level,
            streak=streak,
            xp=award,
        )

    def due_reviews(self, learner_id: str, today: date | None = None, limit: int | None = None) -> list[str]:
        """Exercise ids due for spaced review, most urgent first."""
        candidates = self.store.get_exercise_candidates(learner_id)
        return due_for_review(
            candidates,
            today or self.clock(),
            limit if limit is not None else self.settings.due_review_limit,
        )

    def practice_queue(
        self,
        learner_id: str,
        exercise_ids: Sequence[str] | None = None,
        today: date | None = None,
    ) -> list[str]:
        """
        Rank exercises for free-choice practice.

        Args:
            learner_id: The learner
            exercise_ids: Catalog pool to rank (defaults to attempted exercises)
            today: Reference date
        """
        ids = list(exercise_ids) if exercise_ids is not None else None
        candidates = self.store.get_exercise_candidates(learner_id, ids)
        return prioritize(candidates, today or self.clock())

    # =========================================================================
    # Gamification
    # =========================================================================

    def _award(self, learner_id: str, amount: int, source: str | None, today: date) -> XpAward:
        award = add_xp(self.store.get_progression(learner_id), amount, today, source)
        self.store.save_progression(learner_id, award.state)
        self.store.log_xp(learner_id, amount, source, self._stamp(today))
        if award.level_up:
            logger.info(f"{learner_id} reached level {award.state.current_level}")
        return award

    def award_xp(self, learner_id: str, amount: int, source: str | None = None, today: date | None = None) -> XpAward:
        """Add XP from any source (quests, bonuses, sessions)."""
        with self.store.transaction():
            return self._award(learner_id, amount, source, today or self.clock())

    def check_in(self, learner_id: str, today: date | None = None) -> StreakUpdate:
        """Record daily activity without answering an exercise."""
        with self.store.transaction():
            update = update_streak(self.store.get_streak(learner_id), today or self.clock())
            self.store.save_streak(learner_id, update.state)
        return update

    def use_streak_freeze(self, learner_id: str, today: date | None = None) -> FreezeResult:
        with self.store.transaction():
            result = use_streak_freeze(self.store.get_streak(learner_id), today or self.clock())
            if result.success and result.state is not None:
                self.store.save_streak(learner_id, result.state)
        return result

    def earn_streak_freeze(self, learner_id: str) -> FreezeResult:
        with self.store.transaction():
            result = earn_streak_freeze(self.store.get_streak(learner_id))
            if result.success and result.state is not None:
                self.store.save_streak(learner_id, result.state)
        return result

    def progress(self, learner_id: str, today: date | None = None) -> ProgressSummary:
        return ProgressSummary(
            xp=xp_status(self.store.get_progression(learner_id)),
            streak=streak_status(self.store.get_streak(learner_id), today or self.clock()),
        )

    def leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Learners ranked by total XP."""
        return self.store.get_leaderboard(limit)

    # =========================================================================
    # Emotion & Presentation
    # =========================================================================

    def detect_and_log_emotion(
        self,
        learner_id: str,
        signals: LearnerSignals,
        session_id: str | None = None,
    ) -> DetectedEmotion:
        """Classify signals with the configured rules and log the result."""
        detected = detect_emotion(signals, self.emotion_rules)
        with self.store.transaction():
            self.store.log_emotion(learner_id, detected, self._stamp(self.clock()), session_id)
        return detected

    def choose_presentation(
        self,
        learner_id: str,
        skill_id: str,
        context: LearnerContext,
        generate: Callable[[LearnerContext], PresentationCandidate | None] | None = None,
    ) -> PresentationChoice | None:
        """
        Pick the presentation for a skill and remember it.

        The previously shown presentation for this skill is penalized so
        the learner sees variety.
        """
        candidates = self.presentations.get(skill_id, [])
        with self.store.transaction():
            history = self.store.get_presentation_history(learner_id, skill_id)
            prior = (
                PriorContext(history.last_presentation_id, history.attempts)
                if history is not None
                else None
            )
            choice = resolve_presentation(
                candidates,
                context,
                prior,
                generate=generate,
                fit_threshold=self.settings.presentation_fit_threshold,
            )
            if choice is not None:
                shown_at = self._stamp(self.clock())
                self.store.record_presentation(learner_id, skill_id, choice.candidate.id, shown_at)

        if choice is None:
            logger.warning(f"No presentation available for skill {skill_id}")
        return choice
