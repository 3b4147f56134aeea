"""User Schemas — sign-up and sign-in form validation.

Invariants:
    - RegistrationForm.email: trimmed, lowercased, must look like an address
    - RegistrationForm.password: at least 6 chars, equal to password_confirmation
    - LoginForm accepts anything non-empty; credential checks happen in AuthService

Design Decisions:
    - Regex email check over email-validator: deliverability is not our concern,
      only the shape of the address
"""

import re

from pydantic import BaseModel, Field, ValidationInfo, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegistrationForm(BaseModel):
    email: str = Field(max_length=255)
    password: str = Field(min_length=6, max_length=128)
    password_confirmation: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not re.match(EMAIL_PATTERN, v):
            raise ValueError("is invalid")
        return v

    @field_validator("password_confirmation")
    @classmethod
    def matches_password(cls, v: str, info: ValidationInfo) -> str:
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("doesn't match password")
        return v


class LoginForm(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)
