"""
Daily Streak Tracking.

A streak counts consecutive active days. One missed day can be covered by
a streak freeze; at most one freeze is banked at a time.

State machine (one transition per call, at most one per day):
- no state          -> streak 1, freeze available
- active today      -> unchanged
- active yesterday  -> streak + 1
- active 2 days ago -> streak + 1 if a freeze is available (consumed)
- anything else     -> streak reset to 1
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta

from loguru import logger


@dataclass(frozen=True)
class StreakState:
    """A learner's daily streak."""

    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: date | None = None
    freeze_available: bool = True
    freeze_used_at: date | None = None

    def is_active_on(self, day: date) -> bool:
        return self.last_activity_date == day


@dataclass(frozen=True)
class StreakUpdate:
    state: StreakState
    is_new_streak: bool  # Streak count went up
    freeze_used: bool


@dataclass(frozen=True)
class FreezeResult:
    state: StreakState | None
    success: bool
    message: str


@dataclass(frozen=True)
class StreakStatus:
    current_streak: int
    longest_streak: int
    is_active_today: bool
    freeze_available: bool
    days_until_streak_loss: int | None


def update_streak(state: StreakState | None, today: date) -> StreakUpdate:
    """
    Record activity for `today`.

    Args:
        state: Current streak (None for a learner's first activity)
        today: Activity date

    Returns:
        StreakUpdate with the new state
    """
    if state is None:
        new_state = StreakState(
            current_streak=1,
            longest_streak=1,
            last_activity_date=today,
            freeze_available=True,
        )
        logger.debug("Started first streak")
        return StreakUpdate(new_state, is_new_streak=True, freeze_used=False)

    if state.last_activity_date == today:
        return StreakUpdate(state, is_new_streak=False, freeze_used=False)

    freeze_used = False
    if state.last_activity_date == today - timedelta(days=1):
        streak = state.current_streak + 1
    elif (
        state.last_activity_date == today - timedelta(days=2)
        and state.freeze_available
        and state.freeze_used_at != today
    ):
        streak = state.current_streak + 1
        freeze_used = True
    else:
        streak = 1

    new_state = StreakState(
        current_streak=streak,
        longest_streak=max(state.longest_streak, streak),
        last_activity_date=today,
        freeze_available=False if freeze_used else state.freeze_available,
        freeze_used_at=today if freeze_used else state.freeze_used_at,
    )

    if freeze_used:
        logger.debug(f"Streak freeze covered a missed day, streak={streak}")
    elif streak == 1 and state.current_streak > 1:
        logger.debug(f"Streak of {state.current_streak} lost")

    return StreakUpdate(new_state, is_new_streak=streak > state.current_streak, freeze_used=freeze_used)


def use_streak_freeze(state: StreakState | None, today: date) -> FreezeResult:
    """Spend the banked freeze explicitly."""
    if state is None or not state.freeze_available:
        return FreezeResult(state, success=False, message="No streak freeze available")

    new_state = replace(state, freeze_available=False, freeze_used_at=today)
    return FreezeResult(new_state, success=True, message="Streak freeze used!")


def earn_streak_freeze(state: StreakState | None) -> FreezeResult:
    """Bank a freeze; fails if one is already held."""
    if state is None:
        return FreezeResult(None, success=False, message="No streak to protect yet")
    if state.freeze_available:
        return FreezeResult(state, success=False, message="You already have a streak freeze")

    new_state = replace(state, freeze_available=True, freeze_used_at=None)
    return FreezeResult(new_state, success=True, message="New streak freeze earned!")


def streak_status(state: StreakState | None, today: date) -> StreakStatus:
    """
    Read-only streak summary.

    days_until_streak_loss is the margin left before the streak breaks:
    2 days minus elapsed days with a freeze, 1 without, never below 0.
    """
    if state is None:
        return StreakStatus(0, 0, is_active_today=False, freeze_available=True, days_until_streak_loss=None)

    is_active_today = state.last_activity_date == today
    days_left = 0
    if not is_active_today and state.current_streak > 0 and state.last_activity_date is not None:
        elapsed = (today - state.last_activity_date).days
        margin = 2 if state.freeze_available else 1
        days_left = max(0, margin - elapsed)

    return StreakStatus(
        current_streak=state.current_streak,
        longest_streak=state.longest_streak,
        is_active_today=is_active_today,
        freeze_available=state.freeze_available,
        days_until_streak_loss=days_left,
    )
