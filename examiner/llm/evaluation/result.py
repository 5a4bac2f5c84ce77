"""Assessor result types, before and after validation."""

from __future__ import annotations

import enum
import typing as t
from dataclasses import dataclass

import pydantic as p

from examiner.model import BaseModel


def _none_is_empty(v: t.Any) -> t.Any:
    return "" if v is None else v


class RawAssessment(BaseModel):
    """The assessor's JSON object exactly as parsed; untrusted

    Field types are checked strictly (a quoted number is a parse failure);
    values are not range-checked here.
    """

    model_config = p.ConfigDict(strict=True, extra="ignore")

    score: float
    max_points: float | None = None
    feedback: t.Annotated[str, p.BeforeValidator(_none_is_empty)] = ""
    need_followup: bool = False
    followup_question: t.Annotated[str, p.BeforeValidator(_none_is_empty)] = ""


class Correction(enum.Enum):
    """A repair the validator made to an assessor result"""

    ClampedLower = "clamped_lower"
    ClampedUpper = "clamped_upper"
    Clamped = "clamped"
    MaxPointsMismatch = "max_points_mismatch"
    FeedbackTruncated = "feedback_truncated"
    FollowupTruncated = "followup_truncated"


@dataclass(frozen=True)
class Assessment:
    """A validated assessor result: 0 <= score <= max_points, bounded text"""

    score: float
    max_points: int
    feedback: str
    need_followup: bool
    followup_question: str
    corrections: tuple[Correction, ...] = ()
