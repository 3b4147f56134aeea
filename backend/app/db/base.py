"""SQLAlchemy Declarative Base — shared base class for the users, user_sessions and grams tables.

Invariants:
    - All models inherit from Base
    - Base.metadata is what alembic and the test fixtures create tables from
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all Grammable ORM models."""
    pass
