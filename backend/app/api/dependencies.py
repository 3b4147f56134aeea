"""Request Dependencies — authentication gate, picture storage, and gram handler wiring.

Invariants:
    - get_current_user_id never raises for a missing/expired/unknown cookie;
      it returns None and lets the handler decide
    - One AsyncSession per request, shared by the gate and the repository

Design Decisions:
    - Principal resolved here and passed explicitly into RequestContext
      (no ambient current-user state in services)
    - Storage and handler are dependencies so tests swap them via
      app.dependency_overrides
"""

from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.infrastructure.database import get_db
from app.infrastructure.picture_storage import LocalPictureStorage
from app.services.auth_service import AuthService
from app.services.gram_repository import SqlGramRepository
from app.services.handle_grams import GramHandler


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings.session_duration_hours)


async def get_current_user_id(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> UUID | None:
    """Authentication gate: session cookie → user id (or None)."""
    return await auth.resolve_session(
        request.cookies.get(settings.session_cookie_name),
    )


def get_picture_storage(
    settings: Settings = Depends(get_settings),
) -> LocalPictureStorage:
    return LocalPictureStorage(settings.upload_dir)


def get_gram_handler(
    db: AsyncSession = Depends(get_db),
    storage: LocalPictureStorage = Depends(get_picture_storage),
) -> GramHandler:
    return GramHandler(SqlGramRepository(db), storage)
