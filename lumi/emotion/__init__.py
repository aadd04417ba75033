"""Emotion inference and mascot messaging."""

from lumi.emotion.conditions import Condition, Operator, parse_conditions
from lumi.emotion.engine import (
    DEFAULT_MESSAGES,
    DetectedEmotion,
    Emotion,
    EmotionRule,
    LearnerSignals,
    default_ladder,
    detect_emotion,
    render_message,
)
from lumi.emotion.messages import (
    GreetingContext,
    MascotMessage,
    Mood,
    TimeOfDay,
    encouragement,
    greeting,
    hint,
    session_complete,
    time_of_day,
)

__all__ = [
    "Condition",
    "Operator",
    "parse_conditions",
    "DEFAULT_MESSAGES",
    "DetectedEmotion",
    "Emotion",
    "EmotionRule",
    "LearnerSignals",
    "default_ladder",
    "detect_emotion",
    "render_message",
    "GreetingContext",
    "MascotMessage",
    "Mood",
    "TimeOfDay",
    "encouragement",
    "greeting",
    "hint",
    "session_complete",
    "time_of_day",
]
