"""Gram Schemas — Pydantic models for gram views.

Invariants:
    - picture is exposed as a URL under the upload prefix, never as a filesystem path
    - Timestamps serialized as ISO-8601
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class GramResponse(BaseModel):
    """Public-facing gram data."""
    id: UUID
    message: str
    picture_url: str | None
    user_id: UUID
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_gram(cls, gram, url_prefix: str) -> "GramResponse":
        return cls(
            id=gram.id,
            message=gram.message,
            picture_url=(
                f"{url_prefix.rstrip('/')}/{gram.picture}" if gram.picture else None
            ),
            user_id=gram.user_id,
            created_at=gram.created_at,
            updated_at=gram.updated_at,
        )


class FieldErrorResponse(BaseModel):
    field: str
    message: str


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int
