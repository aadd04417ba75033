"""
SQLite State Store for Lumi.

Provides portable persistence for:
- SM-2 review state per learner and exercise
- Attempt counts feeding mastery levels
- XP ledger, XP history and leaderboard
- Daily streaks
- Emotion detection log
- Last presentation shown per learner and skill

Database location: ~/.lumi/state.db (overridable via LUMI_STATE_DB_PATH)

Dates are stored as ISO-8601 text.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from loguru import logger

from lumi.emotion.engine import DetectedEmotion
from lumi.gamification.progression import ProgressionState
from lumi.gamification.streaks import StreakState
from lumi.review.prioritizer import ExerciseCandidate
from lumi.review.scheduler import ReviewState

# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ExerciseProgress:
    """Attempt counts for one exercise of one learner."""

    exercise_id: str
    attempts: int = 0
    correct: int = 0
    last_attempt_at: datetime | None = None

    @property
    def mastery_level(self) -> float:
        """Accuracy as a 0-100 score."""
        if self.attempts == 0:
            return 0.0
        return self.correct / self.attempts * 100


@dataclass
class EmotionLogEntry:
    id: int
    learner_id: str
    session_id: str | None
    detected_emotion: str
    confidence: float
    signals: dict
    action_taken: str
    created_at: datetime


@dataclass
class LeaderboardEntry:
    rank: int
    learner_id: str
    total_xp: int
    level: int


@dataclass
class PresentationHistory:
    """Last presentation shown for a skill."""

    skill_id: str
    last_presentation_id: str
    attempts: int
    shown_at: datetime


def _to_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _to_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# =============================================================================
# State Store
# =============================================================================


class StateStore:
    """
    SQLite-backed learner state.

    The connection runs in autocommit mode; multi-statement updates go
    through transaction(), which takes the write lock up front so two
    concurrent actions for the same learner serialize.
    """

    DEFAULT_DB_PATH = Path.home() / ".lumi" / "state.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.lumi/state.db)
        """
        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._depth = 0
        self._init_schema()

        logger.info(f"StateStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path), isolation_level=None, timeout=10.0)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS review_state (
                learner_id TEXT NOT NULL,
                exercise_id TEXT NOT NULL,
                interval INTEGER NOT NULL,
                ease_factor REAL NOT NULL,
                repetitions INTEGER NOT NULL,
                next_review_date TEXT NOT NULL,
                PRIMARY KEY (learner_id, exercise_id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS exercise_progress (
                learner_id TEXT NOT NULL,
                exercise_id TEXT NOT NULL,
                attempts INTEGER DEFAULT 0,
                correct INTEGER DEFAULT 0,
                last_attempt_at TEXT,
                PRIMARY KEY (learner_id, exercise_id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS progression (
                learner_id TEXT PRIMARY KEY,
                total_xp INTEGER NOT NULL,
                current_level INTEGER NOT NULL,
                xp_to_next_level INTEGER NOT NULL,
                xp_earned_today INTEGER NOT NULL,
                last_xp_date TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS xp_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                learner_id TEXT NOT NULL,
                amount INTEGER NOT NULL,
                source TEXT,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS streaks (
                learner_id TEXT PRIMARY KEY,
                current_streak INTEGER NOT NULL,
                longest_streak INTEGER NOT NULL,
                last_activity_date TEXT,
                freeze_available INTEGER NOT NULL,
                freeze_used_at TEXT
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS emotion_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                learner_id TEXT NOT NULL,
                session_id TEXT,
                detected_emotion TEXT NOT NULL,
                confidence REAL NOT NULL,
                signals TEXT NOT NULL,
                action_taken TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS presentation_history (
                learner_id TEXT NOT NULL,
                skill_id TEXT NOT NULL,
                presentation_id TEXT NOT NULL,
                attempts INTEGER DEFAULT 1,
                shown_at TEXT NOT NULL,
                PRIMARY KEY (learner_id, skill_id)
            )
        """)

        # Index for fast due-date queries
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_review_state_due
            ON review_state(learner_id, next_review_date)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_xp_history_learner
            ON xp_history(learner_id)
        """)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run a block as one write transaction.

        Nested calls join the outer transaction. Any exception rolls the
        whole transaction back and is re-raised.
        """
        if self._depth:
            self._depth += 1
            try:
                yield self.conn
            finally:
                self._depth -= 1
            return

        self.conn.execute("BEGIN IMMEDIATE")
        self._depth = 1
        try:
            yield self.conn
        except BaseException:
            self.conn.execute("ROLLBACK")
            logger.warning("Transaction rolled back")
            raise
        else:
            self.conn.execute("COMMIT")
        finally:
            self._depth = 0

    # =========================================================================
    # Review State Operations
    # =========================================================================

    def get_review_state(self, learner_id: str, exercise_id: str) -> ReviewState | None:
        """
        Get SM-2 state for an exercise.

        Returns:
            ReviewState, or None if the exercise was never attempted
        """
        row = self.conn.execute(
            "SELECT * FROM review_state WHERE learner_id = ? AND exercise_id = ?",
            (learner_id, exercise_id),
        ).fetchone()
        if row is None:
            return None

        return ReviewState(
            interval=row["interval"],
            ease_factor=row["ease_factor"],
            repetitions=row["repetitions"],
            next_review_date=date.fromisoformat(row["next_review_date"]),
        )

    def save_review_state(self, learner_id: str, exercise_id: str, state: ReviewState) -> None:
        """Save or update SM-2 state for an exercise."""
        self.conn.execute(
            """
            INSERT INTO review_state (
                learner_id, exercise_id, interval, ease_factor, repetitions, next_review_date
            ) VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(learner_id, exercise_id) DO UPDATE SET
                interval = excluded.interval,
                ease_factor = excluded.ease_factor,
                repetitions = excluded.repetitions,
                next_review_date = excluded.next_review_date
        """,
            (
                learner_id,
                exercise_id,
                state.interval,
                state.ease_factor,
                state.repetitions,
                state.next_review_date.isoformat(),
            ),
        )

    # =========================================================================
    # Exercise Progress
    # =========================================================================

    def get_exercise_progress(self, learner_id: str, exercise_id: str) -> ExerciseProgress:
        """Attempt counts (zeroes if never attempted)."""
        row = self.conn.execute(
            "SELECT * FROM exercise_progress WHERE learner_id = ? AND exercise_id = ?",
            (learner_id, exercise_id),
        ).fetchone()
        if row is None:
            return ExerciseProgress(exercise_id=exercise_id)

        return ExerciseProgress(
            exercise_id=exercise_id,
            attempts=row["attempts"],
            correct=row["correct"],
            last_attempt_at=_to_datetime(row["last_attempt_at"]),
        )

    def record_attempt(
        self,
        learner_id: str,
        exercise_id: str,
        is_correct: bool,
        attempted_at: datetime,
    ) -> ExerciseProgress:
        """Increment attempt counts and return the updated progress."""
        self.conn.execute(
            """
            INSERT INTO exercise_progress (learner_id, exercise_id, attempts, correct, last_attempt_at)
            VALUES (?, ?, 1, ?, ?)
            ON CONFLICT(learner_id, exercise_id) DO UPDATE SET
                attempts = attempts + 1,
                correct = correct + excluded.correct,
                last_attempt_at = excluded.last_attempt_at
        """,
            (learner_id, exercise_id, int(is_correct), attempted_at.isoformat()),
        )
        return self.get_exercise_progress(learner_id, exercise_id)

    def get_exercise_candidates(
        self,
        learner_id: str,
        exercise_ids: list[str] | None = None,
    ) -> list[ExerciseCandidate]:
        """
        Build prioritizer inputs from stored progress and review state.

        Args:
            learner_id: The learner
            exercise_ids: Pool to consider, in caller order. Ids with no
                stored history become never-attempted candidates. When
                None, every exercise the learner has attempted is used.

        Returns:
            ExerciseCandidate list
        """
        rows = self.conn.execute(
            """
            SELECT p.exercise_id, p.attempts, p.correct, p.last_attempt_at, r.next_review_date
            FROM exercise_progress p
            LEFT JOIN review_state r
                ON r.learner_id = p.learner_id AND r.exercise_id = p.exercise_id
            WHERE p.learner_id = ?
            ORDER BY p.exercise_id
        """,
            (learner_id,),
        ).fetchall()

        known: dict[str, ExerciseCandidate] = {}
        for row in rows:
            progress = ExerciseProgress(
                exercise_id=row["exercise_id"],
                attempts=row["attempts"],
                correct=row["correct"],
            )
            known[row["exercise_id"]] = ExerciseCandidate(
                id=row["exercise_id"],
                mastery_level=progress.mastery_level,
                last_attempt_at=_to_datetime(row["last_attempt_at"]),
                next_review_date=_to_date(row["next_review_date"]),
            )

        if exercise_ids is None:
            return list(known.values())
        return [known.get(eid) or ExerciseCandidate(id=eid, mastery_level=0.0) for eid in exercise_ids]

    # =========================================================================
    # Progression
    # =========================================================================

    def get_progression(self, learner_id: str) -> ProgressionState | None:
        row = self.conn.execute(
            "SELECT * FROM progression WHERE learner_id = ?", (learner_id,)
        ).fetchone()
        if row is None:
            return None

        return ProgressionState(
            total_xp=row["total_xp"],
            current_level=row["current_level"],
            xp_to_next_level=row["xp_to_next_level"],
            xp_earned_today=row["xp_earned_today"],
            last_xp_date=date.fromisoformat(row["last_xp_date"]),
        )

    def save_progression(self, learner_id: str, state: ProgressionState) -> None:
        self.conn.execute(
            """
            INSERT INTO progression (
                learner_id, total_xp, current_level, xp_to_next_level, xp_earned_today, last_xp_date
            ) VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(learner_id) DO UPDATE SET
                total_xp = excluded.total_xp,
                current_level = excluded.current_level,
                xp_to_next_level = excluded.xp_to_next_level,
                xp_earned_today = excluded.xp_earned_today,
                last_xp_date = excluded.last_xp_date
        """,
            (
                learner_id,
                state.total_xp,
                state.current_level,
                state.xp_to_next_level,
                state.xp_earned_today,
                state.last_xp_date.isoformat(),
            ),
        )

    def log_xp(self, learner_id: str, amount: int, source: str | None, created_at: datetime) -> None:
        self.conn.execute(
            "INSERT INTO xp_history (learner_id, amount, source, created_at) VALUES (?, ?, ?, ?)",
            (learner_id, amount, source, created_at.isoformat()),
        )

    def get_leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]:
        """
        Rank learners by total XP.

        Ties are broken by learner id so the ranking is stable.

        Args:
            limit: Maximum entries to return

        Returns:
            LeaderboardEntry list, rank 1 first
        """
        rows = self.conn.execute(
            """
            SELECT learner_id, total_xp, current_level
            FROM progression
            ORDER BY total_xp DESC, learner_id ASC
            LIMIT ?
        """,
            (limit,),
        ).fetchall()

        return [
            LeaderboardEntry(
                rank=index,
                learner_id=row["learner_id"],
                total_xp=row["total_xp"],
                level=row["current_level"],
            )
            for index, row in enumerate(rows, start=1)
        ]

    def get_xp_history(self, learner_id: str, limit: int = 50) -> list[tuple[int, str | None]]:
        """Most recent (amount, source) pairs, newest first."""
        rows = self.conn.execute(
            "SELECT amount, source FROM xp_history WHERE learner_id = ? ORDER BY id DESC LIMIT ?",
            (learner_id, limit),
        ).fetchall()
        return [(row["amount"], row["source"]) for row in rows]

    # =========================================================================
    # Streaks
    # =========================================================================

    def get_streak(self, learner_id: str) -> StreakState | None:
        row = self.conn.execute("SELECT * FROM streaks WHERE learner_id = ?", (learner_id,)).fetchone()
        if row is None:
            return None

        return StreakState(
            current_streak=row["current_streak"],
            longest_streak=row["longest_streak"],
            last_activity_date=_to_date(row["last_activity_date"]),
            freeze_available=bool(row["freeze_available"]),
            freeze_used_at=_to_date(row["freeze_used_at"]),
        )

    def save_streak(self, learner_id: str, state: StreakState) -> None:
        self.conn.execute(
            """
            INSERT INTO streaks (
                learner_id, current_streak, longest_streak,
                last_activity_date, freeze_available, freeze_used_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(learner_id) DO UPDATE SET
                current_streak = excluded.current_streak,
                longest_streak = excluded.longest_streak,
                last_activity_date = excluded.last_activity_date,
                freeze_available = excluded.freeze_available,
                freeze_used_at = excluded.freeze_used_at
        """,
            (
                learner_id,
                state.current_streak,
                state.longest_streak,
                _iso(state.last_activity_date),
                int(state.freeze_available),
                _iso(state.freeze_used_at),
            ),
        )

    # =========================================================================
    # Emotion Log
    # =========================================================================

    def log_emotion(
        self,
        learner_id: str,
        emotion: DetectedEmotion,
        created_at: datetime,
        session_id: str | None = None,
    ) -> int:
        """
        Record a detection.

        Returns:
            Row id of the log entry
        """
        cursor = self.conn.execute(
            """
            INSERT INTO emotion_log (
                learner_id, session_id, detected_emotion, confidence,
                signals, action_taken, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
            (
                learner_id,
                session_id,
                emotion.emotion.value,
                emotion.confidence,
                json.dumps(emotion.signals),
                emotion.suggested_action,
                created_at.isoformat(),
            ),
        )
        return cursor.lastrowid or 0

    def get_emotion_log(self, learner_id: str, limit: int = 20) -> list[EmotionLogEntry]:
        """Recent detections, newest first."""
        rows = self.conn.execute(
            "SELECT * FROM emotion_log WHERE learner_id = ? ORDER BY id DESC LIMIT ?",
            (learner_id, limit),
        ).fetchall()

        return [
            EmotionLogEntry(
                id=row["id"],
                learner_id=row["learner_id"],
                session_id=row["session_id"],
                detected_emotion=row["detected_emotion"],
                confidence=row["confidence"],
                signals=json.loads(row["signals"]),
                action_taken=row["action_taken"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    # =========================================================================
    # Presentation History
    # =========================================================================

    def get_presentation_history(self, learner_id: str, skill_id: str) -> PresentationHistory | None:
        row = self.conn.execute(
            "SELECT * FROM presentation_history WHERE learner_id = ? AND skill_id = ?",
            (learner_id, skill_id),
        ).fetchone()
        if row is None:
            return None

        return PresentationHistory(
            skill_id=skill_id,
            last_presentation_id=row["presentation_id"],
            attempts=row["attempts"],
            shown_at=datetime.fromisoformat(row["shown_at"]),
        )

    def record_presentation(
        self,
        learner_id: str,
        skill_id: str,
        presentation_id: str,
        shown_at: datetime,
    ) -> None:
        self.conn.execute(
            """
            INSERT INTO presentation_history (learner_id, skill_id, presentation_id, attempts, shown_at)
            VALUES (?, ?, ?, 1, ?)
            ON CONFLICT(learner_id, skill_id) DO UPDATE SET
                presentation_id = excluded.presentation_id,
                attempts = attempts + 1,
                shown_at = excluded.shown_at
        """,
            (learner_id, skill_id, presentation_id, shown_at.isoformat()),
        )

    # =========================================================================
    # Maintenance
    # =========================================================================

    def reset_learner(self, learner_id: str) -> None:
        """Delete everything stored for a learner."""
        with self.transaction():
            for table in (
                "review_state",
                "exercise_progress",
                "progression",
                "xp_history",
                "streaks",
                "emotion_log",
                "presentation_history",
            ):
                self.conn.execute(f"DELETE FROM {table} WHERE learner_id = ?", (learner_id,))
        logger.info(f"Reset all state for learner {learner_id}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> StateStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
