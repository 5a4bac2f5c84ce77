from __future__ import annotations

import logging
import typing as t
from pathlib import Path

import pydantic as p

from examiner.model import Difficulty, PromptVariant

from .base import BaseSettings

logger = logging.getLogger(__name__)


class ExamSettings(BaseSettings):
    """Deployment defaults for assembling and conducting exams"""

    # 0 takes every matching question
    num_questions: int = p.Field(default=0, ge=0)
    difficulty: Difficulty | None = None
    topic: str | None = None
    max_followups: int = p.Field(default=3, ge=0)
    shuffle: bool = True
    prompt_variant: PromptVariant = PromptVariant.Standard
    # relative paths resolve against the project root
    question_files: list[Path] = []

    @p.field_validator("prompt_variant", mode="before")
    @classmethod
    def fallback_variant(cls, v: t.Any) -> t.Any:
        if isinstance(v, PromptVariant):
            return v
        try:
            return PromptVariant(v)
        except ValueError:
            logger.warning(
                "unknown prompt variant, using standard",
                extra={"prompt_variant": v},
            )
            return PromptVariant.Standard

    @p.field_validator("difficulty", "topic", mode="before")
    @classmethod
    def empty_is_none(cls, v: t.Any) -> t.Any:
        return v or None
