"""View models for exam-taking endpoints."""

from __future__ import annotations

import datetime

import pydantic as p

from examiner.model import BlueprintID, Difficulty, ExamSessionID, MessageID, MessageRole, QuestionID, \
    SessionStatus, ThreadID, ThreadStatus, UserID


class StartExamRequest(p.BaseModel):
    """Start a session; filters left out use the deployment defaults."""

    respondent_id: UserID
    blueprint_id: BlueprintID | None = None
    difficulty: Difficulty | None = None
    topic: str | None = None
    num_questions: p.NonNegativeInt | None = None


class AnswerRequest(p.BaseModel):
    text: str


class MessageResponse(p.BaseModel):
    message_id: MessageID
    role: MessageRole
    content: str
    create_time: datetime.datetime


class QuestionResponse(p.BaseModel):
    """A question as the respondent sees it; rubric and reference answer are withheld."""

    question_id: QuestionID
    text: str
    topic: str
    difficulty: Difficulty
    max_points: int


class ThreadResponse(p.BaseModel):
    thread_id: ThreadID
    position: int
    status: ThreadStatus
    question: QuestionResponse
    messages: list[MessageResponse]
    score: float | None = None
    feedback: str | None = None


class SessionResponse(p.BaseModel):
    session_id: ExamSessionID
    respondent_id: UserID
    status: SessionStatus
    started_at: datetime.datetime
    submitted_at: datetime.datetime | None = None
    max_followups: int
    threads: list[ThreadResponse]
    percentage: float | None = None


class SessionSummary(p.BaseModel):
    session_id: ExamSessionID
    status: SessionStatus
    started_at: datetime.datetime
    submitted_at: datetime.datetime | None = None


class SessionListResponse(p.BaseModel):
    sessions: list[SessionSummary]
    total: int


class TurnResponse(p.BaseModel):
    """The assessor's reply to one answer."""

    thread_id: ThreadID
    status: ThreadStatus
    message: MessageResponse
    followup_asked: bool


class GradingItemResponse(p.BaseModel):
    thread_id: ThreadID
    score: float
    max_points: int
    feedback: str
    failed: bool


class SubmitResponse(p.BaseModel):
    session_id: ExamSessionID
    achieved: float
    possible: int
    percentage: float
    items: list[GradingItemResponse]
