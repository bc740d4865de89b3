"""
Pydantic models for the message analysis pipeline.

Models:
  MessageType       — email / sms / call
  RiskLevel         — safe / suspicious / scam / phishing
  AnalysisRequest   — validated, sanitized submission
  AnalysisResult    — structured verdict parsed from the model reply
  FieldError        — one violated field constraint
  ValidationResult  — explicit outcome of validating a raw submission
  AnalysisPrompt    — instruction text plus optional audio attachment
"""

import re
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator, model_validator
from pydantic_core import PydanticCustomError


class MessageType(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    CALL = "call"


class RiskLevel(str, Enum):
    SAFE = "safe"
    SUSPICIOUS = "suspicious"
    SCAM = "scam"
    PHISHING = "phishing"


SENDER_MAX_LENGTH = 255
SUBJECT_MAX_LENGTH = 500
CONTENT_MAX_LENGTH = 10000

CONTENT_REQUIRED_MESSAGE = "Either content or audioData is required"
SENDER_FORMAT_MESSAGE = "Sender must be a valid email or phone number"

# E.164-like: optional "+", first digit 1-9, at most 15 digits in total
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_sender(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value) or PHONE_PATTERN.match(value))


def content_requirement_met(message_type: str, content: Optional[str], audio_data: Optional[str]) -> bool:
    """Calls need content or audio; emails and SMS need content."""
    if message_type == MessageType.CALL.value:
        return bool(content) or bool(audio_data)
    return bool(content)


class AnalysisRequest(BaseModel):
    """
    A submission that has passed validation.

    Field names follow the wire format (``messageType``, ``audioData``) via
    aliases; Python code uses the snake_case attribute names.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message_type: MessageType = Field(alias="messageType")
    sender: str = Field(min_length=1, max_length=SENDER_MAX_LENGTH)
    subject: Optional[str] = Field(default=None, max_length=SUBJECT_MAX_LENGTH)
    content: Optional[str] = Field(default=None, max_length=CONTENT_MAX_LENGTH)
    audio_data: Optional[str] = Field(default=None, alias="audioData")

    @field_validator("sender", "subject", "content", mode="before")
    @classmethod
    def _strip_whitespace(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("sender")
    @classmethod
    def _check_sender_format(cls, value: str) -> str:
        if not is_valid_sender(value):
            raise PydanticCustomError("sender_format", SENDER_FORMAT_MESSAGE)
        return value

    @model_validator(mode="after")
    def _require_content_or_audio(self) -> "AnalysisRequest":
        if not content_requirement_met(self.message_type.value, self.content, self.audio_data):
            raise PydanticCustomError("content_required", CONTENT_REQUIRED_MESSAGE)
        return self

    @property
    def has_audio(self) -> bool:
        return self.message_type == MessageType.CALL and bool(self.audio_data)


class AnalysisResult(BaseModel):
    """
    Verdict returned by the classification model.

    Every field is required and strictly typed: a reply with a quoted or
    boolean score, a missing field, or a non-string reason is rejected
    rather than coerced. Only the risk level's case is normalised.
    """
    model_config = ConfigDict(extra="ignore")

    risk_level: RiskLevel
    risk_score: float = Field(strict=True, ge=0.0, le=1.0)
    flagged_reasons: List[StrictStr]
    analysis: StrictStr
    recommendations: Union[StrictStr, List[StrictStr]]

    @field_validator("risk_level", mode="before")
    @classmethod
    def _normalise_risk_level(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class FieldError(BaseModel):
    field: str
    message: str


class ValidationResult(BaseModel):
    """
    Outcome of validating a raw submission.

    Exactly one of ``request`` (ok) or ``errors`` (not ok) is meaningful.
    """
    request: Optional[AnalysisRequest] = None
    errors: List[FieldError] = []

    @property
    def ok(self) -> bool:
        return self.request is not None and not self.errors


class AnalysisPrompt(BaseModel):
    text: str
    audio_data: Optional[str] = None

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_data)
