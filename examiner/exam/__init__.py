"""Conducting, grading and reviewing exams."""

__all__ = [
    # Errors
    "ConcurrentTurnError",
    "EmptyAnswerError",
    "ExamError",
    "InvalidReviewError",
    "InvalidTransitionError",
    "NoQuestionsError",
    "NotFoundError",
    "SessionNotInProgressError",
    "ThreadCompletedError",
    # Turns
    "ThreadEngine",
    "TurnOutcome",
    # Sessions
    "GradingReport",
    "ItemResult",
    "SessionOrchestrator",
    # Question bank
    "ImportSummary",
    "QuestionBankError",
    "QuestionImport",
    "load_question_bank",
    # Export
    "ExamExport",
    "export_results",
]

from .bank import ImportSummary, load_question_bank, QuestionBankError, QuestionImport
from .engine import ThreadEngine, TurnOutcome
from .errors import ConcurrentTurnError, EmptyAnswerError, ExamError, InvalidReviewError, InvalidTransitionError, \
    NoQuestionsError, NotFoundError, SessionNotInProgressError, ThreadCompletedError
from .export import ExamExport, export_results
from .orchestrator import GradingReport, ItemResult, SessionOrchestrator
