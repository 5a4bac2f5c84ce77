"""Exceptions raised by the assessor gateway."""


class AssessorError(Exception):
    """An assessor call produced no usable result."""


class AssessorConnectionError(AssessorError):
    """The service could not be reached or did not answer in time."""


class AssessorStatusError(AssessorError):
    """The service answered with a non-success status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class AssessorEmptyResponseError(AssessorError):
    """The service answered with no content."""


class AssessorParseError(AssessorError):
    """The content was not a JSON object of the expected shape."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


class AssessorCallError(AssessorError):
    """The client or model wrapper failed in a way the other kinds do not cover."""
