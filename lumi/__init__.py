"""
Lumi adaptive-learning engine.

Decision algorithms behind a children's tutoring platform: spaced review
scheduling, exercise and presentation selection, emotion inference, and
XP/streak gamification. The core packages are pure; lumi.delivery adds
SQLite persistence and a developer CLI.
"""

__version__ = "0.1.0"
