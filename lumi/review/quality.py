"""
Answer Quality Estimation.

Converts a raw attempt outcome into the 0-5 quality scale consumed by the
SM-2 scheduler.

Quality Scale:
0 - Complete blackout
1 - Incorrect, needed hints
2 - Incorrect, no hints used
3 - Correct, but with multiple hints or very slowly
4 - Correct, with one hint or some hesitation
5 - Correct, quick and unaided
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from loguru import logger

from lumi.core.errors import InvalidInputError, require_non_negative


class AnswerQuality(IntEnum):
    """Ordinal quality of a single attempt."""

    BLACKOUT = 0
    WRONG_WITH_HINTS = 1
    WRONG = 2
    CORRECT_HARD = 3
    CORRECT = 4
    PERFECT = 5

    @classmethod
    def coerce(cls, value: int) -> AnswerQuality:
        """
        Validate and convert an integer quality.

        Whole-number floats such as 4.0 are accepted; fractional values,
        strings and None are not.

        Raises:
            InvalidInputError: If value is not a whole number in 0-5
        """
        if not isinstance(value, (int, float)) or (isinstance(value, float) and not value.is_integer()):
            raise InvalidInputError("quality", value, "an integer in [0, 5]")
        try:
            return cls(int(value))
        except ValueError:
            raise InvalidInputError("quality", value, "an integer in [0, 5]") from None

    @property
    def is_passing(self) -> bool:
        """Whether the attempt counts as successful recall."""
        return self >= AnswerQuality.CORRECT_HARD


@dataclass(frozen=True)
class QualityConfig:
    """Timing thresholds for unaided correct answers."""

    quick_ms: int = 10_000  # Faster than this = perfect recall
    slow_ms: int = 60_000  # Slower than this = struggled


DEFAULT_QUALITY_CONFIG = QualityConfig()


def estimate_quality(
    is_correct: bool,
    time_spent_ms: int,
    hints_used: int,
    config: QualityConfig = DEFAULT_QUALITY_CONFIG,
) -> AnswerQuality:
    """
    Convert an attempt outcome to an answer quality.

    Hints dominate timing: any hint caps a correct answer at 4, and
    more than one hint caps it at 3 regardless of speed.

    Args:
        is_correct: Whether the answer was correct
        time_spent_ms: Time taken to answer (milliseconds)
        hints_used: Number of hints revealed before answering
        config: Timing thresholds

    Returns:
        AnswerQuality between 1 and 5

    Raises:
        InvalidInputError: If time or hint count is negative
    """
    require_non_negative("time_spent_ms", time_spent_ms)
    require_non_negative("hints_used", hints_used)

    if not is_correct:
        quality = AnswerQuality.WRONG_WITH_HINTS if hints_used > 0 else AnswerQuality.WRONG
    elif hints_used > 1:
        quality = AnswerQuality.CORRECT_HARD
    elif hints_used == 1:
        quality = AnswerQuality.CORRECT
    elif time_spent_ms < config.quick_ms:
        quality = AnswerQuality.PERFECT
    elif time_spent_ms > config.slow_ms:
        quality = AnswerQuality.CORRECT_HARD
    else:
        quality = AnswerQuality.CORRECT

    logger.debug(
        f"Quality {int(quality)} for correct={is_correct}, "
        f"time={time_spent_ms}ms, hints={hints_used}"
    )
    return quality
