import datetime

import pydantic as p

from .base import BaseModel, WithCtime
from .enum import Difficulty
from .id import BlueprintID, QuestionID


class Question(WithCtime, BaseModel):
    """A bank question; never modified once inserted"""

    question_id: QuestionID
    text: str
    difficulty: Difficulty
    topic: str
    rubric: str = ""
    reference_answer: str = ""
    max_points: p.PositiveInt
    position: int


class Blueprint(WithCtime, BaseModel):
    blueprint_id: BlueprintID
    name: str
    # informational, never enforced
    time_limit_minutes: int | None = None
    max_followups: p.NonNegativeInt


class ImportedFile(BaseModel):
    path: str
    sha256: str
    imported_at: datetime.datetime
