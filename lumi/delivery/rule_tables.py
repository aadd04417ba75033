"""
Rule Table Loading.

Emotion rules and presentation variants live outside the code as JSON
files. Each file is validated with pydantic and converted to the core
dataclasses; anything malformed raises RuleTableError naming the file.

Emotion rules file:

    {"rules": [{"id": "r1", "conditions": {"consecutive_errors": ">=3"},
                "emotion": "frustrated", "suggested_action": "easier_exercise",
                "message_template": "", "priority": 1}]}

Presentations file:

    {"presentations": [{"id": "p1", "skill_id": "fractions",
                        "presentation_type": "story", ...}]}

A bare top-level list is accepted for either file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from lumi.core.errors import RuleTableError
from lumi.emotion.engine import DEFAULT_RULE_CONFIDENCE, Emotion, EmotionRule
from lumi.presentation.selector import PresentationCandidate, PresentationType, TargetProfile

# ========================================
# Models
# ========================================


class EmotionRuleModel(BaseModel):
    """One configured emotion rule."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    conditions: dict[str, str | float] = Field(default_factory=dict)
    emotion: Emotion
    suggested_action: str = Field(min_length=1)
    message_template: str = ""
    priority: int = 0
    is_active: bool = True
    confidence: float = Field(DEFAULT_RULE_CONFIDENCE, ge=0.0, le=1.0)

    def to_rule(self) -> EmotionRule:
        return EmotionRule.from_config(self.model_dump(mode="json"))


class TargetProfileModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    age_range: tuple[int, int] | None = None
    learning_style: str | None = None
    interests: list[str] = Field(default_factory=list)
    level: str | None = None
    energy: str | None = None

    @model_validator(mode="after")
    def _check_age_range(self) -> TargetProfileModel:
        if self.age_range is not None and self.age_range[0] > self.age_range[1]:
            raise ValueError(f"age_range {self.age_range} is reversed")
        return self


class PresentationModel(BaseModel):
    """One content variant for a skill."""

    model_config = ConfigDict(extra="ignore")

    id: str
    skill_id: str
    target_profile: TargetProfileModel = Field(default_factory=TargetProfileModel)
    presentation_type: PresentationType = PresentationType.DIRECT
    pedagogical_approach: str | None = None
    estimated_duration_minutes: float = Field(10, ge=0)
    engagement_score: float = 0.0
    effectiveness_score: float = 0.0
    is_default: bool = False
    is_active: bool = True

    def to_candidate(self) -> PresentationCandidate:
        profile = self.target_profile
        return PresentationCandidate(
            id=self.id,
            target_profile=TargetProfile(
                age_range=profile.age_range,
                learning_style=profile.learning_style,
                interests=tuple(profile.interests),
                level=profile.level,
                energy=profile.energy,
            ),
            presentation_type=self.presentation_type,
            pedagogical_approach=self.pedagogical_approach,
            estimated_duration_minutes=self.estimated_duration_minutes,
            engagement_score=self.engagement_score,
            effectiveness_score=self.effectiveness_score,
            is_default=self.is_default,
            is_active=self.is_active,
        )


# ========================================
# Loaders
# ========================================


def _read_entries(path: Path, key: str) -> list[Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise RuleTableError(f"{path}: file not found") from None
    except json.JSONDecodeError as e:
        raise RuleTableError(f"{path}: invalid JSON ({e})") from e

    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        raise RuleTableError(f"{path}: expected a list under '{key}'")
    return data


def load_emotion_rules(path: Path) -> list[EmotionRule]:
    """
    Load emotion rules from a JSON file.

    Args:
        path: JSON file path

    Returns:
        Rules in file order (the engine sorts by priority)

    Raises:
        RuleTableError: If the file is missing, not JSON, or an entry
            fails validation
    """
    path = Path(path)
    rules: list[EmotionRule] = []
    for index, entry in enumerate(_read_entries(path, "rules")):
        try:
            rules.append(EmotionRuleModel.model_validate(entry).to_rule())
        except ValidationError as e:
            raise RuleTableError(f"{path}: rule #{index} is invalid: {e}") from e

    inactive = sum(1 for r in rules if not r.is_active)
    logger.info(f"Loaded {len(rules)} emotion rules from {path} ({inactive} inactive)")
    return rules


def load_presentations(path: Path) -> dict[str, list[PresentationCandidate]]:
    """
    Load presentation variants grouped by skill.

    A duplicate id within the same skill is skipped with a warning; the
    first occurrence wins.

    Returns:
        Mapping of skill_id to candidates in file order

    Raises:
        RuleTableError: If the file is missing, not JSON, or an entry
            fails validation
    """
    path = Path(path)
    by_skill: dict[str, list[PresentationCandidate]] = {}
    seen: set[tuple[str, str]] = set()

    for index, entry in enumerate(_read_entries(path, "presentations")):
        try:
            model = PresentationModel.model_validate(entry)
        except ValidationError as e:
            raise RuleTableError(f"{path}: presentation #{index} is invalid: {e}") from e

        if (model.skill_id, model.id) in seen:
            logger.warning(f"Duplicate presentation {model.id} for skill {model.skill_id} skipped")
            continue
        seen.add((model.skill_id, model.id))
        by_skill.setdefault(model.skill_id, []).append(model.to_candidate())

    logger.info(f"Loaded presentations for {len(by_skill)} skills from {path}")
    return by_skill
