"""SQL Gram Repository — GramRepository implementation over an AsyncSession.

Invariants:
    - find() returns None for malformed ids instead of raising
    - Every mutation commits before returning; failures surface through
      DatabaseSessionManager as DatabaseError after rollback
    - list_page() is ordered newest first

Design Decisions:
    - Repository owns commit: one mutation per request, no unit of work needed
"""

import logging
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import GramId, UserId
from app.models.gram import Gram

logger = logging.getLogger(__name__)


def parse_gram_id(raw: str) -> GramId | None:
    """Parse a path id; anything that isn't a UUID resolves to no gram."""
    try:
        return GramId(UUID(raw))
    except (ValueError, TypeError, AttributeError):
        return None


class SqlGramRepository:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def find(self, gram_id: str) -> Gram | None:
        uid = parse_gram_id(gram_id)
        if uid is None:
            return None
        result = await self._db.execute(select(Gram).where(Gram.id == uid))
        return result.scalar_one_or_none()

    async def list_page(self, limit: int, offset: int) -> list[Gram]:
        result = await self._db.execute(
            select(Gram)
            .order_by(Gram.created_at.desc(), Gram.id)
            .limit(limit)
            .offset(offset),
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self._db.execute(select(func.count()).select_from(Gram))
        return result.scalar_one()

    async def create(self, attrs: dict, owner_id: UserId) -> Gram:
        gram = Gram(user_id=owner_id, **attrs)
        self._db.add(gram)
        await self._db.commit()
        await self._db.refresh(gram)
        return gram

    async def update(self, gram: Gram, attrs: dict) -> Gram:
        for key, value in attrs.items():
            setattr(gram, key, value)
        await self._db.commit()
        await self._db.refresh(gram)
        return gram

    async def delete(self, gram: Gram) -> None:
        await self._db.delete(gram)
        await self._db.commit()
