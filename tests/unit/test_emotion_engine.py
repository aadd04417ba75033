"""
Unit tests for emotion inference.

Tests the default ladder ordering and configured rule matching:
- Priority order and stable ties
- Fail-closed handling of unknown signals and bad comparators
- Message templates and default messages

Run: pytest tests/unit/test_emotion_engine.py -v
"""

from dataclasses import replace

import pytest

from lumi.emotion.engine import (
    DEFAULT_MESSAGES,
    Emotion,
    EmotionRule,
    LearnerSignals,
    default_ladder,
    detect_emotion,
    render_message,
)


def rule(emotion, conditions, priority=0, **extra):
    config = {
        "emotion": emotion,
        "suggested_action": f"{emotion}_action",
        "conditions": conditions,
        "priority": priority,
    }
    config.update(extra)
    return EmotionRule.from_config(config)


class TestDefaultLadder:
    """Test the built-in fallback heuristics."""

    def test_frustrated_beats_struggling(self, calm_signals):
        signals = replace(
            calm_signals,
            consecutive_errors=3,
            response_time_ratio=2.0,
            hint_requests=4,
            success_rate=0.2,
        )
        detected = detect_emotion(signals)
        assert detected.emotion is Emotion.FRUSTRATED
        assert detected.suggested_action == "easier_exercise"
        assert detected.confidence == 0.75

    def test_bored(self, calm_signals):
        signals = replace(calm_signals, response_time_ratio=0.4, success_rate=0.95)
        detected = detect_emotion(signals)
        assert (detected.emotion, detected.suggested_action) == (Emotion.BORED, "difficulty_increase")

    def test_tired(self, calm_signals):
        signals = replace(calm_signals, response_time_ratio=3.0, session_duration_minutes=25)
        detected = detect_emotion(signals)
        assert detected.emotion is Emotion.TIRED
        assert detected.confidence == 0.65

    def test_confident(self, calm_signals):
        signals = replace(calm_signals, consecutive_correct=5, response_time_ratio=0.8)
        detected = detect_emotion(signals)
        assert detected.emotion is Emotion.CONFIDENT
        assert detected.suggested_action == "celebration"

    def test_struggling(self, calm_signals):
        signals = replace(calm_signals, hint_requests=3, success_rate=0.25)
        assert detect_emotion(signals).emotion is Emotion.STRUGGLING

    def test_engaged_fallback(self, calm_signals):
        detected = default_ladder(calm_signals)
        assert detected.emotion is Emotion.ENGAGED
        assert detected.suggested_action == "continue"
        assert detected.confidence == 0.5

    def test_bored_boundaries_are_strict(self, calm_signals):
        signals = replace(calm_signals, response_time_ratio=0.5, success_rate=0.95)
        assert detect_emotion(signals).emotion is Emotion.ENGAGED


class TestConfiguredRules:
    """Test configurable rule tables."""

    def test_first_match_by_priority(self, calm_signals):
        rules = [
            rule("bored", {"success_rate": ">0.5"}, priority=2),
            rule("confident", {"success_rate": ">0.5"}, priority=1),
        ]
        detected = detect_emotion(calm_signals, rules)
        assert detected.emotion is Emotion.CONFIDENT
        assert detected.confidence == 0.8

    def test_ties_keep_given_order(self, calm_signals):
        rules = [
            rule("tired", {"success_rate": ">0.5"}, priority=1, id="first"),
            rule("bored", {"success_rate": ">0.5"}, priority=1, id="second"),
        ]
        assert detect_emotion(calm_signals, rules).rule_id == "first"

    def test_all_conditions_required(self, calm_signals):
        rules = [rule("tired", {"success_rate": ">0.5", "consecutive_errors": ">=1"})]
        assert detect_emotion(calm_signals, rules).emotion is Emotion.ENGAGED

    def test_unknown_signal_fails_closed(self, calm_signals):
        rules = [rule("bored", {"heart_rate": ">0"})]
        assert detect_emotion(calm_signals, rules).emotion is Emotion.ENGAGED

    def test_bad_comparator_loses_turn(self, calm_signals):
        rules = [
            rule("bored", {"success_rate": "!=0"}, priority=1),
            rule("confident", {"success_rate": ">0"}, priority=2),
        ]
        assert detect_emotion(calm_signals, rules).emotion is Emotion.CONFIDENT

    def test_no_match_falls_back_to_ladder(self, calm_signals):
        signals = replace(calm_signals, consecutive_errors=4, response_time_ratio=2.0)
        rules = [rule("bored", {"success_rate": ">0.99"})]
        assert detect_emotion(signals, rules).emotion is Emotion.FRUSTRATED

    def test_inactive_rules_skipped(self, calm_signals):
        rules = [rule("bored", {"success_rate": ">0"}, is_active=False)]
        assert detect_emotion(calm_signals, rules).emotion is Emotion.ENGAGED

    def test_session_duration_alias(self, calm_signals):
        rules = [rule("tired", {"session_duration": ">=10"})]
        assert detect_emotion(calm_signals, rules).emotion is Emotion.TIRED

    def test_string_signal(self, calm_signals):
        signals = replace(calm_signals, click_variance="high")
        rules = [rule("frustrated", {"click_variance": "high"})]
        assert detect_emotion(signals, rules).emotion is Emotion.FRUSTRATED

    def test_missing_string_signal(self, calm_signals):
        rules = [rule("frustrated", {"click_variance": "high"})]
        assert detect_emotion(calm_signals, rules).emotion is Emotion.ENGAGED

    def test_custom_confidence(self, calm_signals):
        rules = [rule("bored", {}, confidence=0.6)]
        assert detect_emotion(calm_signals, rules).confidence == 0.6

    def test_rules_not_mutated(self, calm_signals):
        rules = [rule("bored", {}, priority=5), rule("tired", {}, priority=1)]
        detect_emotion(calm_signals, rules)
        assert [r.emotion for r in rules] == [Emotion.BORED, Emotion.TIRED]

    def test_to_config_round_trip(self):
        original = rule("tired", {"session_duration": ">20"}, priority=3, id="r1")
        assert EmotionRule.from_config(original.to_config()) == original


class TestMessages:
    """Test message selection and templates."""

    def test_empty_template_uses_default(self, calm_signals):
        detected = detect_emotion(calm_signals, [rule("bored", {})])
        assert detected.message == DEFAULT_MESSAGES[Emotion.BORED]

    def test_template_placeholders(self, calm_signals):
        signals = replace(calm_signals, consecutive_errors=4)
        rules = [rule("frustrated", {}, message_template="{consecutive_errors} in a row, {name}!")]
        assert detect_emotion(signals, rules).message == "4 in a row, {name}!"

    @pytest.mark.parametrize("template", ["Unbalanced {", "Positional {}"])
    def test_unformattable_template_verbatim(self, calm_signals, template):
        assert render_message(template, calm_signals) == template

    def test_signals_attached(self, calm_signals):
        detected = detect_emotion(calm_signals)
        assert detected.signals["success_rate"] == 0.7


def test_value_of_unknown_signal():
    assert LearnerSignals().value_of("nonexistent") is None
    assert LearnerSignals().value_of("value_of") is None
