import enum

from .base import BaseModel, WithCtime
from .id import MessageID, ThreadID


class MessageRole(enum.Enum):
    Respondent = "respondent"
    Assessor = "assessor"
    System = "system"


class Message(WithCtime, BaseModel):
    message_id: MessageID
    thread_id: ThreadID
    role: MessageRole
    content: str
    # strictly increasing within a thread, starting at 0
    position: int
    # approximate, see examiner.llm.tokens.estimate_tokens
    token_count: int = 0
