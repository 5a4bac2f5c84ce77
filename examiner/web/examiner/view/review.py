"""View models for reviewer endpoints."""

from __future__ import annotations

import datetime

import pydantic as p

from examiner.model import ExamSessionID, SessionStatus, ThreadID, UserID


class ReviewSummary(p.BaseModel):
    """A graded session awaiting or past review."""

    session_id: ExamSessionID
    respondent_id: UserID
    status: SessionStatus
    started_at: datetime.datetime
    submitted_at: datetime.datetime | None = None
    auto_percentage: float | None = None
    final_percentage: float | None = None


class ReviewListResponse(p.BaseModel):
    reviews: list[ReviewSummary]
    total: int


class ScoreOverrideRequest(p.BaseModel):
    score: float
    comment: str | None = None


class ScoreResponse(p.BaseModel):
    thread_id: ThreadID
    auto_score: float
    auto_feedback: str
    override_score: float | None = None
    override_comment: str | None = None
    effective_score: float


class FinalizeRequest(p.BaseModel):
    final_percentage: float
    reviewer_id: UserID


class GradeResponse(p.BaseModel):
    session_id: ExamSessionID
    auto_percentage: float
    final_percentage: float | None = None
    reviewed_by: UserID | None = None
    reviewed_at: datetime.datetime | None = None
