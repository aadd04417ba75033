"""
Unit tests for mascot messages.

Run: pytest tests/unit/test_messages.py -v
"""

import random
from datetime import datetime

import pytest

from lumi.emotion.messages import (
    GreetingContext,
    Mood,
    TimeOfDay,
    encouragement,
    greeting,
    hint,
    session_complete,
    time_of_day,
)


class TestGreeting:
    """Test greeting precedence."""

    def test_achievement_first(self):
        context = GreetingContext("Mia", current_streak=10, recent_achievement="Fraction Master")
        message = greeting(context, random.Random(0))
        assert "Fraction Master" in message.message
        assert message.mood is Mood.CELEBRATING

    def test_long_streak(self):
        message = greeting(GreetingContext("Mia", current_streak=7), random.Random(0))
        assert "7 days" in message.message

    def test_short_streak(self):
        message = greeting(GreetingContext("Mia", current_streak=3), random.Random(0))
        assert message.mood is Mood.EXCITED

    def test_first_visit_by_time_of_day(self):
        context = GreetingContext("Mia", is_first_visit_today=True, time_of_day=TimeOfDay.AFTERNOON)
        assert "afternoon" in greeting(context, random.Random(0)).message

    def test_mastered_skills(self):
        message = greeting(GreetingContext("Mia", mastered_skills=12), random.Random(0))
        assert message.mood is Mood.PROUD

    def test_random_pool_is_seeded(self):
        context = GreetingContext("Mia")
        first = greeting(context, random.Random(42))
        second = greeting(context, random.Random(42))
        assert first == second
        assert "Mia" in first.message


class TestEncouragement:
    """Test reactions to answers."""

    def test_hot_streak(self):
        message = encouragement(True, 6, random.Random(0))
        assert message.message.startswith("6 right answers")

    def test_wrong_answer_is_encouraging(self):
        rng = random.Random(1)
        for _ in range(10):
            assert encouragement(False, 0, rng).mood in {Mood.ENCOURAGING, Mood.THINKING}

    def test_hint_seeded(self):
        assert hint(random.Random(3)) == hint(random.Random(3))


class TestSessionComplete:
    """Test session summary tiers."""

    @pytest.mark.parametrize(
        "correct,total,mood",
        [
            (9, 10, Mood.CELEBRATING),
            (7, 10, Mood.PROUD),
            (5, 10, Mood.ENCOURAGING),
            (1, 10, Mood.ENCOURAGING),
            (0, 0, Mood.ENCOURAGING),
        ],
    )
    def test_tiers(self, correct, total, mood):
        assert session_complete(correct, total, 50).mood is mood

    def test_includes_xp(self):
        assert "30 XP" in session_complete(8, 10, 30).message


@pytest.mark.parametrize(
    "hour,expected",
    [(5, TimeOfDay.MORNING), (12, TimeOfDay.AFTERNOON), (17, TimeOfDay.EVENING), (21, TimeOfDay.NIGHT), (3, TimeOfDay.NIGHT)],
)
def test_time_of_day(hour, expected):
    assert time_of_day(datetime(2024, 3, 15, hour)) is expected
