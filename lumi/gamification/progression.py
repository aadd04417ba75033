"""
XP and Level Progression.

Experience points accumulate into levels following a fixed, non-uniform
threshold table. Entry N is the XP needed to go from level N to N+1; past
the end of the table every level costs the last entry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

from loguru import logger

from lumi.core.errors import require_non_negative

LEVEL_THRESHOLDS: tuple[int, ...] = (
    100, 150, 200, 300, 400, 500, 650, 800, 1000, 1200,
    1500, 1800, 2200, 2600, 3000, 3500, 4000, 4500, 5000, 6000,
)  # fmt: skip


@dataclass(frozen=True)
class ProgressionState:
    """A learner's XP ledger."""

    total_xp: int
    current_level: int
    xp_to_next_level: int
    xp_earned_today: int
    last_xp_date: date


@dataclass(frozen=True)
class XpAward:
    """Outcome of adding XP."""

    state: ProgressionState
    level_up: bool
    previous_level: int

    @property
    def levels_gained(self) -> int:
        return self.state.current_level - self.previous_level


@dataclass(frozen=True)
class XpStatus:
    total_xp: int
    current_level: int
    xp_to_next_level: int
    xp_earned_today: int
    progress_percent: int


def xp_for_level(level: int) -> int:
    """XP needed to advance from `level` to `level + 1`."""
    if level <= 0:
        return 0
    if level > len(LEVEL_THRESHOLDS):
        return LEVEL_THRESHOLDS[-1]
    return LEVEL_THRESHOLDS[level - 1]


def cumulative_xp_for_level(level: int) -> int:
    """Total XP at which `level` is reached (0 for level 1)."""
    return sum(xp_for_level(i) for i in range(1, level))


def level_for_total_xp(total_xp: int) -> int:
    """Largest level whose cumulative threshold is <= total_xp."""
    level = 1
    reached = 0
    while total_xp >= reached + xp_for_level(level):
        reached += xp_for_level(level)
        level += 1
    return level


def add_xp(
    state: ProgressionState | None,
    amount: int,
    today: date,
    source: str | None = None,
) -> XpAward:
    """
    Add XP and walk the level table forward.

    Args:
        state: Current ledger (None for a learner with no XP yet)
        amount: XP to add (must be >= 0)
        today: Date of the award; the daily counter resets when it changes
        source: Free-form origin label, used for logging only

    Returns:
        XpAward with the new state and whether a level was gained

    Raises:
        InvalidInputError: If amount is negative
    """
    require_non_negative("amount", amount)

    if state is None:
        state = ProgressionState(
            total_xp=0,
            current_level=1,
            xp_to_next_level=xp_for_level(1),
            xp_earned_today=0,
            last_xp_date=today,
        )

    new_total = state.total_xp + amount
    earned_today = state.xp_earned_today + amount if state.last_xp_date == today else amount

    level = state.current_level
    reached = cumulative_xp_for_level(level)
    while new_total >= reached + xp_for_level(level):
        reached += xp_for_level(level)
        level += 1

    new_state = ProgressionState(
        total_xp=new_total,
        current_level=level,
        xp_to_next_level=reached + xp_for_level(level) - new_total,
        xp_earned_today=earned_today,
        last_xp_date=today,
    )
    award = XpAward(state=new_state, level_up=level > state.current_level, previous_level=state.current_level)

    if award.level_up:
        logger.debug(f"Level up {state.current_level} -> {level} (+{amount} XP from {source or 'unknown'})")
    else:
        logger.debug(f"+{amount} XP from {source or 'unknown'}, {new_state.xp_to_next_level} to next level")
    return award


def xp_status(state: ProgressionState | None) -> XpStatus:
    """Summary with percent progress through the current level."""
    if state is None:
        return XpStatus(
            total_xp=0,
            current_level=1,
            xp_to_next_level=xp_for_level(1),
            xp_earned_today=0,
            progress_percent=0,
        )

    level_span = xp_for_level(state.current_level)
    into_level = level_span - state.xp_to_next_level
    progress = math.floor(into_level / level_span * 100 + 0.5) if level_span else 0
    return XpStatus(
        total_xp=state.total_xp,
        current_level=state.current_level,
        xp_to_next_level=state.xp_to_next_level,
        xp_earned_today=state.xp_earned_today,
        progress_percent=progress,
    )
