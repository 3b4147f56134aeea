"""Boundary Protocols — contracts between the gram handler and its collaborators.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO (database, picture files) accessed through Protocol types
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, so the SQL repository and the
      in-memory test fake need no common base class
    - find() returns None for unknown AND malformed ids: callers map both to 404
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from app.core.domain_types import UserId
from app.core.request_context import PictureUpload


class GramLike(Protocol):
    """Structural contract for Gram objects handed around by the handler."""
    id: UUID
    message: str
    picture: str
    user_id: UUID
    created_at: datetime
    updated_at: datetime


class GramRepository(Protocol):
    """Record store for grams, implemented by shell."""
    async def find(self, gram_id: str) -> GramLike | None: ...
    async def list_page(self, limit: int, offset: int) -> list[GramLike]: ...
    async def count(self) -> int: ...
    async def create(self, attrs: dict, owner_id: UserId) -> GramLike: ...
    async def update(self, gram: GramLike, attrs: dict) -> GramLike: ...
    async def delete(self, gram: GramLike) -> None: ...


class PictureStorage(Protocol):
    """Attachment store for gram pictures, implemented by shell."""
    async def save(self, upload: PictureUpload) -> str: ...
    async def delete(self, ref: str) -> None: ...
