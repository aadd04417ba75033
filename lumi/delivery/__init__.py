"""
Lumi delivery layer.

Everything around the pure engines that touches the outside world.

Components:
- StateStore: SQLite persistence of learner state
- LearnerService: load / decide / save cycle per learner action
- Rule tables: JSON loaders for emotion rules and presentations
- cli: developer terminal interface
"""

from .learner_service import AnswerOutcome, LearnerService, ProgressSummary
from .rule_tables import load_emotion_rules, load_presentations
from .state_store import ExerciseProgress, LeaderboardEntry, StateStore

__all__ = [
    # Persistence
    "StateStore",
    "ExerciseProgress",
    "LeaderboardEntry",
    # Service
    "LearnerService",
    "AnswerOutcome",
    "ProgressSummary",
    # Rule tables
    "load_emotion_rules",
    "load_presentations",
]
