"""
Pydantic models for trusted contacts.
"""

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from app.models.analysis import SENDER_FORMAT_MESSAGE, SENDER_MAX_LENGTH, is_valid_sender


class TrustedContact(BaseModel):
    """Full trusted_contacts record from the database."""
    model_config = {"from_attributes": True}

    id: str
    user_id: str
    contact_value: str
    created_at: str


class TrustedContactCreate(BaseModel):
    """
    Request body for POST /api/trusted-contacts.

    contact_value follows the same email / phone rules as a message sender,
    since it is matched against senders.
    """
    contact_value: str = Field(min_length=1, max_length=SENDER_MAX_LENGTH)

    @field_validator("contact_value", mode="before")
    @classmethod
    def _strip_whitespace(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("contact_value")
    @classmethod
    def _check_format(cls, value: str) -> str:
        if not is_valid_sender(value):
            raise PydanticCustomError("contact_format", SENDER_FORMAT_MESSAGE)
        return value
