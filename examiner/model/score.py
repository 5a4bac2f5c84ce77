import datetime

from .base import BaseModel, WithMtime
from .id import ExamSessionID, ThreadID, UserID


class Score(WithMtime, BaseModel):
    thread_id: ThreadID
    auto_score: float
    auto_feedback: str
    override_score: float | None = None
    override_comment: str | None = None

    @property
    def effective_score(self) -> float:
        return self.override_score if self.override_score is not None else self.auto_score


class Grade(WithMtime, BaseModel):
    session_id: ExamSessionID
    auto_percentage: float
    final_percentage: float | None = None
    reviewed_by: UserID | None = None
    reviewed_at: datetime.datetime | None = None
