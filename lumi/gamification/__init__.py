"""XP progression and daily streaks."""

from lumi.gamification.progression import (
    LEVEL_THRESHOLDS,
    ProgressionState,
    XpAward,
    XpStatus,
    add_xp,
    cumulative_xp_for_level,
    level_for_total_xp,
    xp_for_level,
    xp_status,
)
from lumi.gamification.streaks import (
    FreezeResult,
    StreakState,
    StreakStatus,
    StreakUpdate,
    earn_streak_freeze,
    streak_status,
    update_streak,
    use_streak_freeze,
)

__all__ = [
    "LEVEL_THRESHOLDS",
    "ProgressionState",
    "XpAward",
    "XpStatus",
    "add_xp",
    "cumulative_xp_for_level",
    "level_for_total_xp",
    "xp_for_level",
    "xp_status",
    "FreezeResult",
    "StreakState",
    "StreakStatus",
    "StreakUpdate",
    "earn_streak_freeze",
    "streak_status",
    "update_streak",
    "use_streak_freeze",
]
