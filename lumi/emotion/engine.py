"""
Emotion Inference.

Classifies a learner's in-session behaviour into an emotional state and a
suggested pedagogical action.

Configured rules are tried first, in ascending priority. When no rules are
supplied, or none match, a fixed ladder of heuristics decides:

1. frustrated  - many errors and slow answers
2. bored       - fast answers and near-perfect success
3. tired       - very slow answers late in a long session
4. confident   - a run of quick correct answers
5. struggling  - lots of hints and low success
6. engaged     - everything else
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from lumi.emotion.conditions import Condition, parse_conditions

DEFAULT_RULE_CONFIDENCE = 0.8


class Emotion(str, Enum):
    """Emotional states the engine can detect."""

    ENGAGED = "engaged"
    FRUSTRATED = "frustrated"
    BORED = "bored"
    TIRED = "tired"
    CONFIDENT = "confident"
    STRUGGLING = "struggling"


# Short fallback line used when a configured rule has no template
DEFAULT_MESSAGES: dict[Emotion, str] = {
    Emotion.FRUSTRATED: "Don't panic! Take your time.",
    Emotion.BORED: "Shall we try something more fun?",
    Emotion.TIRED: "You've worked hard. Time for a break?",
    Emotion.CONFIDENT: "You're doing great!",
    Emotion.STRUGGLING: "I'm here to help you.",
    Emotion.ENGAGED: "Great work!",
}

FALLBACK_MESSAGE = "Keep going!"

# Names used by stored rule tables that differ from the attribute names
SIGNAL_ALIASES: dict[str, str] = {
    "session_duration": "session_duration_minutes",
}


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class LearnerSignals:
    """Behavioural signals computed by the caller for the current session."""

    response_time_avg: float = 0.0  # Seconds
    response_time_ratio: float = 1.0  # Observed / expected latency
    consecutive_errors: int = 0
    consecutive_correct: int = 0
    session_duration_minutes: float = 0.0
    hint_requests: int = 0
    success_rate: float = 0.0  # 0-1
    click_variance: str | None = None  # low, normal, high

    def value_of(self, name: str) -> Any:
        """
        Look up a signal by its rule-table name.

        Returns None for names that are not signals.
        """
        attr = SIGNAL_ALIASES.get(name, name)
        if attr not in _SIGNAL_FIELDS:
            return None
        return getattr(self, attr)

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in _SIGNAL_FIELDS}


_SIGNAL_FIELDS = frozenset(LearnerSignals.__dataclass_fields__)


@dataclass(frozen=True)
class EmotionRule:
    """
    A configurable detection rule.

    Conditions are parsed once at construction through from_config; the
    raw comparator strings are kept so the rule can be written back.
    """

    emotion: Emotion
    suggested_action: str
    conditions: tuple[Condition, ...] = ()
    message_template: str = ""
    priority: int = 0
    id: str | None = None
    is_active: bool = True
    confidence: float = DEFAULT_RULE_CONFIDENCE

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> EmotionRule:
        """
        Build a rule from a stored configuration row.

        Args:
            data: Mapping with conditions, emotion, suggested_action,
                message_template and priority (id, is_active and
                confidence are optional)

        Returns:
            EmotionRule with pre-parsed conditions
        """
        return cls(
            emotion=Emotion(data["emotion"]),
            suggested_action=data["suggested_action"],
            conditions=parse_conditions(dict(data.get("conditions") or {})),
            message_template=data.get("message_template") or "",
            priority=int(data.get("priority", 0)),
            id=data.get("id"),
            is_active=bool(data.get("is_active", True)),
            confidence=float(data.get("confidence", DEFAULT_RULE_CONFIDENCE)),
        )

    def to_config(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "conditions": {c.signal: c.raw for c in self.conditions},
            "emotion": self.emotion.value,
            "suggested_action": self.suggested_action,
            "message_template": self.message_template,
            "priority": self.priority,
            "is_active": self.is_active,
            "confidence": self.confidence,
        }

    def matches(self, signals: LearnerSignals) -> bool:
        """All conditions must hold; unknown signals never match."""
        return all(c.evaluate(signals.value_of(c.signal)) for c in self.conditions)


@dataclass(frozen=True)
class DetectedEmotion:
    """Result of emotion inference."""

    emotion: Emotion
    confidence: float
    suggested_action: str
    message: str
    rule_id: str | None = None
    signals: dict[str, Any] = field(default_factory=dict, compare=False)


# =============================================================================
# Message Rendering
# =============================================================================


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_message(template: str, signals: LearnerSignals) -> str:
    """
    Fill {signal_name} placeholders from the signals.

    Unknown placeholders are left as written; a template that cannot be
    formatted at all is returned unchanged.
    """
    values = _KeepMissing(signals.to_dict())
    for alias, attr in SIGNAL_ALIASES.items():
        values[alias] = values[attr]
    try:
        return template.format_map(values)
    except (ValueError, IndexError, AttributeError, TypeError):
        logger.debug(f"Message template not formattable, used verbatim: {template!r}")
        return template


def default_message(emotion: Emotion) -> str:
    return DEFAULT_MESSAGES.get(emotion, FALLBACK_MESSAGE)


# =============================================================================
# Detection
# =============================================================================


def default_ladder(signals: LearnerSignals) -> DetectedEmotion:
    """
    Built-in heuristics, evaluated top to bottom; first hit wins.

    Always returns a result (engaged when nothing else applies).
    """
    s = signals
    if s.consecutive_errors >= 3 and s.response_time_ratio > 1.5:
        return DetectedEmotion(
            Emotion.FRUSTRATED,
            0.75,
            "easier_exercise",
            "I can see this one is a bit hard. Shall we try something simpler?",
        )
    if s.response_time_ratio < 0.5 and s.success_rate > 0.9:
        return DetectedEmotion(
            Emotion.BORED,
            0.7,
            "difficulty_increase",
            "You're too good for this! Ready for something more challenging?",
        )
    if s.response_time_ratio > 2.5 and s.session_duration_minutes > 20:
        return DetectedEmotion(
            Emotion.TIRED,
            0.65,
            "break_suggestion",
            "You've been working for a while. How about a little break?",
        )
    if s.consecutive_correct >= 5 and s.response_time_ratio < 1:
        return DetectedEmotion(
            Emotion.CONFIDENT,
            0.8,
            "celebration",
            "Wow! You're on fire!",
        )
    if s.hint_requests >= 3 and s.success_rate < 0.3:
        return DetectedEmotion(
            Emotion.STRUGGLING,
            0.7,
            "guided_help",
            "I'll help you step by step. Look closely...",
        )
    return DetectedEmotion(Emotion.ENGAGED, 0.5, "continue", "Keep it up!")


def detect_emotion(
    signals: LearnerSignals,
    rules: Iterable[EmotionRule] | None = None,
) -> DetectedEmotion:
    """
    Classify learner signals.

    Args:
        signals: Current session signals
        rules: Configured rules (any order; sorted by priority here,
            ties keep the given order). Inactive rules are skipped.

    Returns:
        DetectedEmotion from the first matching rule, or from the
        default ladder
    """
    ordered = sorted((r for r in rules or () if r.is_active), key=lambda r: r.priority)

    for rule in ordered:
        if rule.matches(signals):
            message = (
                render_message(rule.message_template, signals)
                if rule.message_template
                else default_message(rule.emotion)
            )
            logger.debug(
                f"Emotion rule {rule.id or rule.priority} matched: "
                f"{rule.emotion.value} -> {rule.suggested_action}"
            )
            return DetectedEmotion(
                emotion=rule.emotion,
                confidence=rule.confidence,
                suggested_action=rule.suggested_action,
                message=message,
                rule_id=rule.id,
                signals=signals.to_dict(),
            )

    if ordered:
        logger.debug(f"No configured rule matched out of {len(ordered)}, using default ladder")

    detected = default_ladder(signals)
    logger.debug(f"Default ladder: {detected.emotion.value} ({detected.confidence})")
    return DetectedEmotion(
        emotion=detected.emotion,
        confidence=detected.confidence,
        suggested_action=detected.suggested_action,
        message=detected.message,
        signals=signals.to_dict(),
    )
