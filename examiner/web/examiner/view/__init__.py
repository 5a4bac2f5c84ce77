"""View models for the exam HTTP API."""

__all__ = [
    # Exam views
    "AnswerRequest",
    "GradingItemResponse",
    "MessageResponse",
    "QuestionResponse",
    "SessionListResponse",
    "SessionResponse",
    "SessionSummary",
    "StartExamRequest",
    "SubmitResponse",
    "ThreadResponse",
    "TurnResponse",
    # Review views
    "FinalizeRequest",
    "GradeResponse",
    "ReviewListResponse",
    "ReviewSummary",
    "ScoreOverrideRequest",
    "ScoreResponse",
]

from .exam import AnswerRequest, GradingItemResponse, MessageResponse, QuestionResponse, SessionListResponse, \
    SessionResponse, SessionSummary, StartExamRequest, SubmitResponse, ThreadResponse, TurnResponse
from .review import FinalizeRequest, GradeResponse, ReviewListResponse, ReviewSummary, ScoreOverrideRequest, \
    ScoreResponse
