"""
Configuration settings for the Lumi personalization engine.

Uses Pydantic Settings for environment variable management with .env file support.
Only the delivery layer (state store, service, CLI) reads these settings; the
engines take their tunables as plain dataclass configs.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LUMI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    state_db_path: Path = Field(
        default=Path.home() / ".lumi" / "state.db",
        description="SQLite file holding learner review, XP and streak state",
    )

    # ========================================
    # Rule Tables
    # ========================================
    emotion_rules_path: Path | None = Field(
        default=None,
        description="JSON file with configurable emotion rules (default ladder when unset)",
    )
    presentations_path: Path | None = Field(
        default=None,
        description="JSON file with presentation candidates for the CLI",
    )

    # ========================================
    # Engine Defaults
    # ========================================
    due_review_limit: int = Field(
        default=10,
        ge=1,
        description="Maximum exercises returned by a due-review query",
    )
    xp_per_correct_answer: int = Field(
        default=10,
        ge=0,
        description="XP awarded for each correct answer recorded through the service",
    )
    presentation_fit_threshold: float = Field(
        default=30.0,
        description="Score an existing presentation must beat before generation is requested",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
