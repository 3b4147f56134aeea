"""Auth Service — account registration, password checks, and session tokens.

Invariants:
    - Passwords are stored as bcrypt hashes only
    - Session tokens are 32 bytes from secrets.token_urlsafe, unique per session
    - Expired sessions resolve to no user and are deleted on sight
    - Expiry is compared in SQL, never against a datetime loaded from the DB

Design Decisions:
    - Server-side sessions (user_sessions table) over signed cookies:
      sign-out is a row delete
    - resolve_session returns a UUID, not a User: the gram core only needs
      the principal id
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserSession

logger = logging.getLogger(__name__)


class EmailTakenError(ValueError):
    """Registration attempted with an email that already has an account."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Users and login sessions over one AsyncSession."""

    def __init__(self, db: AsyncSession, session_duration_hours: int = 24):
        self.db = db
        self.session_duration_hours = session_duration_hours

    async def register_user(self, email: str, password: str) -> User:
        """Create an account. Raises EmailTakenError if the email is in use."""
        email = normalize_email(email)
        if await self.find_by_email(email):
            raise EmailTakenError(f"Email '{email}' already registered")
        user = User(email=email, password_hash=hash_password(password))
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Registered user {user.id}", extra={"user_id": str(user.id)})
        return user

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email)),
        )
        return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str) -> User | None:
        user = await self.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Sign-in failed: bad email or password")
            return None
        return user

    async def create_session(self, user_id: UUID) -> UserSession:
        session = UserSession(
            user_id=user_id,
            token=secrets.token_urlsafe(32),
            expires_at=datetime.now(timezone.utc)
            + timedelta(hours=self.session_duration_hours),
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)
        logger.info(f"Signed in user {user_id}", extra={"user_id": str(user_id)})
        return session

    async def resolve_session(self, token: str | None) -> UUID | None:
        """Authentication gate: map a cookie token to a user id, or None."""
        if not token:
            return None
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            select(UserSession.user_id).where(
                UserSession.token == token, UserSession.expires_at > now,
            ),
        )
        user_id = result.scalar_one_or_none()
        if user_id is None:
            await self._purge_expired(token, now)
        return user_id

    async def logout(self, token: str | None) -> bool:
        if not token:
            return False
        result = await self.db.execute(
            delete(UserSession).where(UserSession.token == token),
        )
        await self.db.commit()
        return result.rowcount > 0

    async def _purge_expired(self, token: str, now: datetime) -> None:
        result = await self.db.execute(
            delete(UserSession).where(
                UserSession.token == token, UserSession.expires_at <= now,
            ),
        )
        if result.rowcount:
            await self.db.commit()
            logger.info("Expired session removed")
