__all__ = [
    # Base
    "BaseModel",
    "WithCtime",
    "WithMtime",
    # Enums
    "DeploymentEnvironment",
    "Difficulty",
    "PromptVariant",
    # ID Types
    "BlueprintID",
    "ExamSessionID",
    "MessageID",
    "QuestionID",
    "ThreadID",
    "UserID",
    # Question bank
    "Blueprint",
    "ImportedFile",
    "Question",
    # Sessions
    "ExamSession",
    "SessionStatus",
    "SessionView",
    "Thread",
    "ThreadStatus",
    "ThreadView",
    # Conversation
    "Message",
    "MessageRole",
    # Results
    "Grade",
    "Score",
]

from .base import BaseModel, WithCtime, WithMtime
from .enum import DeploymentEnvironment, Difficulty, PromptVariant
from .exam import ExamSession, SessionStatus, SessionView, Thread, ThreadStatus, ThreadView
from .id import BlueprintID, ExamSessionID, MessageID, QuestionID, ThreadID, UserID
from .message import Message, MessageRole
from .question import Blueprint, ImportedFile, Question
from .score import Grade, Score
