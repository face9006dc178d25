"""Pydantic request schemas used by the API.

Schemas keep API input shapes stable and provide validation for
controller handlers and tests.
"""

from typing import Any, Optional

from pydantic import BaseModel, field_validator


class CredentialsIn(BaseModel):
    """Payload for the register/login endpoints.

    Both fields are optional at the schema level so that the services can
    answer missing values with their own error messages.
    """
    email: Optional[str] = None
    pin: Optional[str] = None

    @field_validator("pin", mode="before")
    @classmethod
    def _numeric_pin(cls, value: Any):
        # PINs are often sent as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class QuestionIn(BaseModel):
    """A question as accepted by the create and update endpoints."""
    title: str
    content: str
    subject_id: int
    difficulty: Optional[str] = None
    answer: Optional[str] = None
    code: Optional[str] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty_as_text(cls, value: Any):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value
