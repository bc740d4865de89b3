"""
Error taxonomy for the analysis pipeline.

Every error is an ``HTTPException`` subclass with a fixed status code and a
default user-facing message, so routers can simply let them propagate and
the handlers in ``app.main`` render them as::

    {"error": "<message>", "details": "<optional details>"}
"""

from typing import Optional

from fastapi import HTTPException


class ScamwatchError(HTTPException):
    """Base class for errors surfaced to the caller."""

    status_code: int = 500
    message: str = "Unknown error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=message or self.message)
        self.details = details


class ValidationError(ScamwatchError):
    """Malformed or missing input fields. Never reaches classification."""

    status_code = 400
    message = "Validation failed"

    def __init__(self, field_errors: list, message: Optional[str] = None):
        self.field_errors = list(field_errors)
        details = ", ".join(f"{e.field}: {e.message}" for e in self.field_errors)
        super().__init__(message=message, details=details or None)


class AuthenticationError(ScamwatchError):
    status_code = 401
    message = "Authentication required. Please log in."


class UpstreamQuotaExhausted(ScamwatchError):
    status_code = 402
    message = "AI credits exhausted. Please add credits to continue."


class UpstreamRateLimited(ScamwatchError):
    status_code = 429
    message = "AI rate limit exceeded. Please try again later."


class UpstreamClassificationFailure(ScamwatchError):
    status_code = 502
    message = "AI analysis failed"


class PersistenceError(ScamwatchError):
    status_code = 500
    message = "Failed to save analysis"


class UnknownError(ScamwatchError):
    status_code = 500
    message = "Unknown error"
