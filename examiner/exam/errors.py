"""Domain errors raised by the exam layer."""


class ExamError(Exception):
    """Base class; the HTTP layer maps subclasses to client errors."""


class NotFoundError(ExamError):
    def __init__(self, kind: str, key: object):
        super().__init__(f"{kind} {key} not found")
        self.kind = kind
        self.key = key


class SessionNotInProgressError(ExamError):
    """The session no longer accepts answers."""


class EmptyAnswerError(ExamError):
    """The answer was blank after trimming whitespace."""


class ThreadCompletedError(ExamError):
    """The thread is completed and accepts no further turns."""


class NoQuestionsError(ExamError):
    """No bank question matches the selection."""


class InvalidTransitionError(ExamError):
    """The session is not in the status the operation requires."""


class ConcurrentTurnError(ExamError):
    """Another turn on the same thread was written first."""


class InvalidReviewError(ExamError):
    """A review value is out of range."""
