"""User ORM — signed-up account and its login sessions.

Invariants:
    - email is unique and stored lowercased
    - password_hash is a bcrypt hash, never the plain password
    - UserSession.token is unique, random, and bound to exactly one user

Design Decisions:
    - Server-side session rows over signed cookies: sign-out and expiry are a
      DELETE away, no key rotation needed
    - cascade delete: removing a user removes their sessions and grams
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class User(Base):
    """Account that owns grams."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    grams: Mapped[list["Gram"]] = relationship(
        "Gram", back_populates="user",
        cascade="all, delete-orphan", lazy="raise", passive_deletes=True,
    )
    sessions: Mapped[list["UserSession"]] = relationship(
        "UserSession", back_populates="user",
        cascade="all, delete-orphan", lazy="raise", passive_deletes=True,
    )


class UserSession(Base):
    """Login session: the cookie token resolves to user_id until expires_at."""
    __tablename__ = "user_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    token: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship("User", back_populates="sessions")
