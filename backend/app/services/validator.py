"""
Input validation and sanitization for analysis submissions.

Validation turns an untyped JSON body into an AnalysisRequest or a list of
every violated field constraint. Sanitization then strips markup that could
turn a stored message into script when the dashboard renders it. The two
steps are independent: sanitization never rejects input, it only degrades
the string.

Public API:
  validate_analysis_request(raw) -> ValidationResult
  sanitize_text(value) -> str
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from app.models.analysis import (
    CONTENT_REQUIRED_MESSAGE,
    AnalysisRequest,
    FieldError,
    ValidationResult,
    content_requirement_met,
)

logger = logging.getLogger(__name__)

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_URI = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)


def sanitize_text(value: str) -> str:
    """
    Remove angle brackets, ``javascript:`` prefixes and ``on<event>=``
    attributes from a string.

    Patterns are removed repeatedly until the string stops changing, so
    fragments that reassemble after one pass (``jajavascript:vascript:``)
    are removed too and sanitizing twice is the same as sanitizing once.
    """
    previous = None
    while previous != value:
        previous = value
        value = _ANGLE_BRACKETS.sub("", value)
        value = _JAVASCRIPT_URI.sub("", value)
        value = _EVENT_HANDLER.sub("", value)
    return value


def _sanitize_optional(value: Optional[str]) -> Optional[str]:
    return sanitize_text(value) if value else value


def sanitize_request(request: AnalysisRequest) -> AnalysisRequest:
    """Return a copy of ``request`` with sender, subject and content sanitized."""
    return request.model_copy(
        update={
            "sender": sanitize_text(request.sender),
            "subject": _sanitize_optional(request.subject),
            "content": _sanitize_optional(request.content),
        }
    )


def _stripped(value: Any) -> Optional[str]:
    return value.strip() if isinstance(value, str) else None


def _to_field_errors(exc: PydanticValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        # Model-level errors carry an empty loc; the only one is the
        # content-or-audio rule.
        errors.append(FieldError(field=loc or "content", message=err.get("msg", "Invalid value")))
    return errors


def validate_analysis_request(raw: Any) -> ValidationResult:
    """
    Validate a raw submission and sanitize it on success.

    The content-or-audio rule is reported alongside field errors even when
    other fields fail, so the caller sees every problem at once.
    """
    if not isinstance(raw, Mapping):
        return ValidationResult(
            errors=[FieldError(field="body", message="Request body must be a JSON object")]
        )

    try:
        request = AnalysisRequest.model_validate(dict(raw))
    except PydanticValidationError as exc:
        errors = _to_field_errors(exc)
        already_reported = any(e.message == CONTENT_REQUIRED_MESSAGE for e in errors)
        if not already_reported and not content_requirement_met(
            str(raw.get("messageType")),
            _stripped(raw.get("content")),
            raw.get("audioData") if isinstance(raw.get("audioData"), str) else None,
        ):
            errors.append(FieldError(field="content", message=CONTENT_REQUIRED_MESSAGE))
        logger.info(
            "Rejected analysis request: invalid fields %s",
            sorted({e.field for e in errors}),
        )
        return ValidationResult(errors=errors)

    return ValidationResult(request=sanitize_request(request))
