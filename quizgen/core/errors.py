from __future__ import annotations


class QuizError(Exception):
    """Base class for caller-facing quiz session errors."""


class FetchInProgressError(QuizError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"A {kind} request is already in progress")
        self.kind = kind


class NoActiveQuizError(QuizError):
    def __init__(self) -> None:
        super().__init__("Generate a quiz before loading more questions")


class SessionClosedError(QuizError):
    def __init__(self) -> None:
        super().__init__("Quiz session has been closed")


class NetworkError(Exception):
    """Transport failure or non-success HTTP status from the generation service."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedEnvelopeError(Exception):
    """A successful HTTP response whose body is not a JSON document."""
