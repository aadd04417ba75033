"""
Mascot flavour text.

Short lines spoken by Lumi, the tutoring mascot, at session milestones.
Any random choice draws from the caller's random.Random so output is
reproducible under a fixed seed.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Mood(str, Enum):
    """Mascot animation to pair with a message."""

    HAPPY = "happy"
    EXCITED = "excited"
    THINKING = "thinking"
    ENCOURAGING = "encouraging"
    CELEBRATING = "celebrating"
    CURIOUS = "curious"
    PROUD = "proud"
    NEUTRAL = "neutral"
    WAVING = "waving"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


@dataclass(frozen=True)
class MascotMessage:
    message: str
    mood: Mood


@dataclass(frozen=True)
class GreetingContext:
    """What the mascot knows when greeting a learner."""

    student_name: str
    current_streak: int = 0
    level: int = 1
    mastered_skills: int = 0
    time_of_day: TimeOfDay = TimeOfDay.MORNING
    is_first_visit_today: bool = False
    recent_achievement: str | None = None


def time_of_day(now: datetime) -> TimeOfDay:
    hour = now.hour
    if 5 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 17:
        return TimeOfDay.AFTERNOON
    if 17 <= hour < 21:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def greeting(context: GreetingContext, rng: random.Random) -> MascotMessage:
    """
    Pick a greeting.

    Achievements beat streaks, streaks beat first-visit greetings, and
    progress milestones beat the generic pool.
    """
    name = context.student_name

    if context.recent_achievement:
        return MascotMessage(
            f'{name}, you unlocked "{context.recent_achievement}"! I\'m so proud of you!',
            Mood.CELEBRATING,
        )

    if context.current_streak >= 7:
        return MascotMessage(
            f"Amazing {name}! {context.current_streak} days in a row! You're a real star!",
            Mood.CELEBRATING,
        )
    if context.current_streak >= 3:
        return MascotMessage(
            f"Great {name}! {context.current_streak} days in a row, keep it up!",
            Mood.EXCITED,
        )

    if context.is_first_visit_today:
        if context.time_of_day == TimeOfDay.MORNING:
            return MascotMessage(f"Good morning {name}! Ready for a great day of learning?", Mood.WAVING)
        if context.time_of_day == TimeOfDay.AFTERNOON:
            return MascotMessage(f"Hi {name}! Nice to see you this afternoon!", Mood.HAPPY)
        if context.time_of_day == TimeOfDay.EVENING:
            return MascotMessage(f"Good evening {name}! A quick session before dinner?", Mood.WAVING)
        return MascotMessage(f"Good evening {name}! A quick session before bed?", Mood.WAVING)

    if context.mastered_skills >= 10:
        return MascotMessage(
            f"{name}, you've already mastered {context.mastered_skills} skills! You're incredible!",
            Mood.PROUD,
        )
    if context.level >= 5:
        return MascotMessage(f"Level {context.level}! {name}, you're making fast progress!", Mood.EXCITED)

    return rng.choice(
        [
            MascotMessage(f"Hi {name}! What are we learning today?", Mood.CURIOUS),
            MascotMessage(f"{name}, I'm happy to see you! Shall we continue?", Mood.HAPPY),
            MascotMessage(f"Hey {name}! Ready for new adventures?", Mood.EXCITED),
            MascotMessage(f"{name}, together we'll do wonders!", Mood.ENCOURAGING),
        ]
    )


_CORRECT_MESSAGES = (
    MascotMessage("Excellent! You got it!", Mood.HAPPY),
    MascotMessage("Well done! That's the right answer!", Mood.CELEBRATING),
    MascotMessage("Super! You're really good at this!", Mood.PROUD),
    MascotMessage("Perfect! Keep it up!", Mood.EXCITED),
)

_INCORRECT_MESSAGES = (
    MascotMessage("No worries, we learn from our mistakes!", Mood.ENCOURAGING),
    MascotMessage("Keep going, you'll get there!", Mood.ENCOURAGING),
    MascotMessage("Try again, I believe in you!", Mood.ENCOURAGING),
    MascotMessage("Practice is how we get better!", Mood.THINKING),
)

_HINT_MESSAGES = (
    MascotMessage("Hmm, let me think...", Mood.THINKING),
    MascotMessage("I'll help you! Here's a hint...", Mood.CURIOUS),
    MascotMessage("Read the question carefully...", Mood.THINKING),
)


def encouragement(is_correct: bool, streak_count: int, rng: random.Random) -> MascotMessage:
    """React to a single answer."""
    if is_correct:
        if streak_count >= 5:
            return MascotMessage(f"{streak_count} right answers in a row! You're on fire!", Mood.CELEBRATING)
        if streak_count >= 3:
            return MascotMessage("Bravo! Great answer, keep it up!", Mood.EXCITED)
        return rng.choice(_CORRECT_MESSAGES)
    return rng.choice(_INCORRECT_MESSAGES)


def hint(rng: random.Random) -> MascotMessage:
    return rng.choice(_HINT_MESSAGES)


def session_complete(correct_count: int, total_count: int, xp_earned: int) -> MascotMessage:
    """Summary line for the end of a session, tiered by accuracy."""
    accuracy = math.floor(correct_count / total_count * 100 + 0.5) if total_count > 0 else 0

    if accuracy >= 90:
        return MascotMessage(
            f"Incredible! {accuracy}% correct and {xp_earned} XP earned! You're a champion!",
            Mood.CELEBRATING,
        )
    if accuracy >= 70:
        return MascotMessage(
            f"Great session! {correct_count}/{total_count} right answers and {xp_earned} XP!",
            Mood.PROUD,
        )
    if accuracy >= 50:
        return MascotMessage(f"Well played! You earned {xp_earned} XP. Keep practising!", Mood.ENCOURAGING)
    return MascotMessage("Thanks for playing! Every exercise makes you stronger!", Mood.ENCOURAGING)
