"""Service test fixtures — async DB, FastAPI test client, seeded users and grams.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db overridden to use the test DB; picture storage overridden to tmp_path
    - db_manager patched so the readiness probe sees the test engine
    - Seed helpers write through their own short-lived sessions, and assertions
      re-read through fresh sessions (never a session the app also used)

Design Decisions:
    - One low-cost bcrypt hash computed at import: hashing per user would
      dominate test time
"""

import itertools

import bcrypt
import pytest
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import get_picture_storage
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.infrastructure.picture_storage import LocalPictureStorage
from app.models.gram import Gram
from app.models.user import User
from app.services.auth_service import AuthService
import app.infrastructure.database as db_module
from app.main import app
from tests.services.fakes import PASSWORD, PNG_BYTES

PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
def storage(tmp_path):
    return LocalPictureStorage(tmp_path / "uploads")


@pytest.fixture
async def client(test_engine, test_session_factory, storage):
    """FastAPI test client with DB and picture storage overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_picture_storage] = lambda: storage

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_session_factory):
    """Factory: insert a user with PASSWORD as password."""
    counter = itertools.count(1)

    async def _make(email: str | None = None) -> User:
        user = User(
            email=email or f"user{next(counter)}@example.com",
            password_hash=PASSWORD_HASH,
        )
        async with test_session_factory() as db:
            db.add(user)
            await db.commit()
            await db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_gram(test_session_factory, make_user, storage):
    """Factory: insert a gram (and its owner unless given) with a stored picture."""
    async def _make(user: User | None = None, message: str = "hello world") -> Gram:
        owner = user or await make_user()
        ref = "seed.png"
        storage.root.mkdir(parents=True, exist_ok=True)
        (storage.root / ref).write_bytes(PNG_BYTES)
        gram = Gram(user_id=owner.id, message=message, picture=ref)
        async with test_session_factory() as db:
            db.add(gram)
            await db.commit()
            await db.refresh(gram)
        return gram

    return _make


@pytest.fixture
def sign_in(test_session_factory):
    """Start a session for user and attach its cookie to the client."""
    async def _sign_in(client: AsyncClient, user: User) -> str:
        async with test_session_factory() as db:
            session = await AuthService(db).create_session(user.id)
        client.cookies.set("session_token", session.token)
        return session.token

    return _sign_in


@pytest.fixture
def reload_gram(test_session_factory):
    """Re-read a gram through a fresh session (None if deleted)."""
    async def _reload(gram_id) -> Gram | None:
        async with test_session_factory() as db:
            result = await db.execute(select(Gram).where(Gram.id == gram_id))
            return result.scalar_one_or_none()

    return _reload


@pytest.fixture
def count_grams(test_session_factory):
    async def _count() -> int:
        async with test_session_factory() as db:
            result = await db.execute(select(func.count()).select_from(Gram))
            return result.scalar_one()

    return _count
