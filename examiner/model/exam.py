import datetime
import enum

from .base import BaseModel, WithCtime
from .id import BlueprintID, ExamSessionID, QuestionID, ThreadID, UserID
from .message import Message
from .question import Blueprint, Question
from .score import Grade, Score


class SessionStatus(enum.Enum):
    InProgress = "in_progress"
    Submitted = "submitted"
    Grading = "grading"
    Graded = "graded"
    Reviewed = "reviewed"


class ThreadStatus(enum.Enum):
    Open = "open"
    Answered = "answered"
    Completed = "completed"


class ExamSession(WithCtime, BaseModel):
    session_id: ExamSessionID
    blueprint_id: BlueprintID
    respondent_id: UserID
    status: SessionStatus = SessionStatus.InProgress
    started_at: datetime.datetime
    submitted_at: datetime.datetime | None = None


class Thread(WithCtime, BaseModel):
    thread_id: ThreadID
    session_id: ExamSessionID
    question_id: QuestionID
    position: int
    status: ThreadStatus = ThreadStatus.Open
    # bumped on every mutation; writers compare-and-set against it
    revision: int = 0


class ThreadView(BaseModel):
    thread: Thread
    question: Question
    messages: list[Message]
    score: Score | None = None


class SessionView(BaseModel):
    session: ExamSession
    blueprint: Blueprint
    threads: list[ThreadView]
    grade: Grade | None = None
