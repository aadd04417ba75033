"""
Unit tests for answer quality estimation.

Run: pytest tests/unit/test_quality.py -v
"""

import pytest

from lumi.core.errors import InvalidInputError
from lumi.review.quality import AnswerQuality, QualityConfig, estimate_quality


class TestEstimateQuality:
    """Test estimate_quality mapping."""

    # ========================================
    # Incorrect Answers
    # ========================================

    def test_wrong_without_hints(self):
        assert estimate_quality(False, 5000, 0) == 2

    def test_wrong_with_hints(self):
        assert estimate_quality(False, 5000, 1) == 1

    def test_wrong_ignores_timing(self):
        """Timing never matters for a wrong answer."""
        assert estimate_quality(False, 120_000, 0) == AnswerQuality.WRONG
        assert estimate_quality(False, 100, 3) == AnswerQuality.WRONG_WITH_HINTS

    # ========================================
    # Correct Answers
    # ========================================

    def test_quick_unaided_is_perfect(self):
        assert estimate_quality(True, 5000, 0) == 5

    def test_one_hint(self):
        assert estimate_quality(True, 5000, 1) == 4

    def test_multiple_hints(self):
        assert estimate_quality(True, 5000, 2) == 3

    def test_hints_dominate_timing(self):
        """A slow answer with one hint is still 4."""
        assert estimate_quality(True, 90_000, 1) == 4

    def test_medium_speed(self):
        assert estimate_quality(True, 30_000, 0) == 4

    def test_slow_answer(self):
        assert estimate_quality(True, 60_001, 0) == 3

    def test_threshold_boundaries(self):
        """10s exactly is not quick; 60s exactly is not slow."""
        assert estimate_quality(True, 9_999, 0) == 5
        assert estimate_quality(True, 10_000, 0) == 4
        assert estimate_quality(True, 60_000, 0) == 4

    def test_custom_thresholds(self):
        config = QualityConfig(quick_ms=2_000, slow_ms=20_000)
        assert estimate_quality(True, 5_000, 0, config) == 4
        assert estimate_quality(True, 25_000, 0, config) == 3

    # ========================================
    # Validation
    # ========================================

    def test_negative_time_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            estimate_quality(True, -1, 0)
        assert exc.value.field == "time_spent_ms"

    def test_negative_hints_rejected(self):
        with pytest.raises(InvalidInputError):
            estimate_quality(True, 1000, -2)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            estimate_quality(False, -5, 0)


class TestAnswerQuality:
    """Test AnswerQuality helpers."""

    def test_coerce_valid(self):
        assert AnswerQuality.coerce(4) is AnswerQuality.CORRECT

    @pytest.mark.parametrize("value", [-1, 6, 42])
    def test_coerce_out_of_range(self, value):
        with pytest.raises(InvalidInputError):
            AnswerQuality.coerce(value)

    def test_is_passing(self):
        assert AnswerQuality.CORRECT_HARD.is_passing
        assert not AnswerQuality.WRONG.is_passing
