"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from datetime import date
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from lumi.emotion.engine import LearnerSignals
from lumi.presentation.selector import (
    LearnerContext,
    PresentationCandidate,
    PresentationType,
    TargetProfile,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite state store)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def today():
    """A fixed reference date."""
    return date(2024, 3, 15)


@pytest.fixture
def calm_signals():
    """Signals that match nothing in the default ladder."""
    return LearnerSignals(
        response_time_avg=8.0,
        response_time_ratio=1.0,
        consecutive_errors=0,
        consecutive_correct=2,
        session_duration_minutes=10,
        hint_requests=0,
        success_rate=0.7,
    )


@pytest.fixture
def learner_context():
    """An eight-year-old visual learner who likes animals."""
    return LearnerContext(
        age=8,
        learning_style="visual",
        interests=frozenset({"animals", "space"}),
        preferred_method="storytelling",
        energy_level="medium",
        time_available_minutes=10,
    )


@pytest.fixture
def sample_presentations():
    """Three variants of the same skill."""
    return [
        PresentationCandidate(
            id="story-animals",
            target_profile=TargetProfile(age_range=(6, 9), learning_style="visual", interests=("animals",)),
            presentation_type=PresentationType.STORY,
            pedagogical_approach="storytelling",
            estimated_duration_minutes=10,
        ),
        PresentationCandidate(
            id="direct-default",
            presentation_type=PresentationType.DIRECT,
            estimated_duration_minutes=40,
            is_default=True,
        ),
        PresentationCandidate(
            id="game-teen",
            target_profile=TargetProfile(age_range=(12, 15)),
            presentation_type=PresentationType.GAME,
            estimated_duration_minutes=12,
        ),
    ]
