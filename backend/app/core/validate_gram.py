"""Gram Validation — field rules for create and update payloads.

Invariants:
    - All functions are PURE: they inspect values and return a ValidationResult
    - message must contain at least one non-whitespace character
    - A gram always ends up with a picture: required on create, on update the
      current picture counts when no new one is uploaded
    - An uploaded picture must be non-empty and have an image/* content type

Design Decisions:
    - Collect every field error instead of stopping at the first: the form is
      re-rendered once with all problems listed
    - Validation runs on the merged (current + submitted) values for update,
      so create and update share one rule set
"""

from dataclasses import dataclass, field

from app.core.request_context import PictureUpload


@dataclass(frozen=True)
class FieldError:
    """One failed rule on one form field."""
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def check_message(message: str | None) -> FieldError | None:
    if message is None or not message.strip():
        return FieldError("message", "can't be blank")
    return None


def check_picture(upload: PictureUpload | None, has_current: bool) -> FieldError | None:
    if upload is None:
        if has_current:
            return None
        return FieldError("picture", "can't be blank")
    if not upload.data:
        return FieldError("picture", "is empty")
    if not (upload.content_type or "").startswith("image/"):
        return FieldError("picture", "must be an image")
    return None


def validate_gram_input(
    message: str | None,
    picture: PictureUpload | None,
    has_current_picture: bool = False,
) -> ValidationResult:
    """Validate the message/picture a gram would end up with."""
    errors = [
        e for e in (
            check_message(message),
            check_picture(picture, has_current_picture),
        )
        if e is not None
    ]
    return ValidationResult(errors=errors)
