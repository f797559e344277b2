"""
ReviewGate — Domain exception hierarchy.

The core raises these instead of bare ``ValueError`` so that host adapters
(the FastAPI exception handler, the serverless wrapper) can map them to a
status code without string matching.
"""

from __future__ import annotations


class ReviewGateError(Exception):
    """Base for all domain exceptions."""

    def __init__(self, message: str = "An unexpected error occurred", *, status_code: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SourceValidationError(ReviewGateError):
    """Malformed invocation: source is not a string or is blank (400)."""

    def __init__(self, message: str = "Invalid input: \"code\" must be a non-empty string") -> None:
        super().__init__(message, status_code=400)


class SourceTooLargeError(SourceValidationError):
    """Source exceeds the configured byte ceiling (413)."""

    def __init__(self, message: str = "Source exceeds the maximum allowed size") -> None:
        super().__init__(message)
        self.status_code = 413


class CodeSyntaxError(ReviewGateError):
    """Source could not be parsed (422). Terminal: never retried."""

    def __init__(self, message: str = "Syntax Error") -> None:
        super().__init__(message, status_code=422)


class InternalAnalysisError(ReviewGateError):
    """Unexpected failure while traversing a parsed tree (500).

    The message is generic; the underlying exception is chained
    and logged server-side only.
    """

    def __init__(self, message: str = "Internal error during code analysis") -> None:
        super().__init__(message, status_code=500)


class ReviewNotFoundError(ReviewGateError):
    """Stored review not found (404)."""

    def __init__(self, message: str = "Review not found") -> None:
        super().__init__(message, status_code=404)


class InvalidReviewIdError(ReviewGateError):
    """Review id is not in the store's id format (400)."""

    def __init__(self, message: str = "Invalid review ID format") -> None:
        super().__init__(message, status_code=400)
