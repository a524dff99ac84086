"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from cryptography.fernet import Fernet
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from speechpro.db.models import Base
from speechpro.db.session import get_db
from speechpro.main import app
from speechpro.services.encryption import FieldCipher
from speechpro.services.record_store import RecordStore, get_record_store


class FakeUpload:
    """File handle with an async read(), like FastAPI's UploadFile."""

    def __init__(self, filename: str, content: bytes = b"RIFF\x24\x00\x00\x00WAVEfmt "):
        self.filename = filename
        self._content = content

    async def read(self) -> bytes:
        return self._content


@pytest.fixture
def cipher() -> FieldCipher:
    """Cipher with a fresh random key."""
    return FieldCipher(Fernet.generate_key())


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a test database engine backed by a per-test SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def store(cipher: FieldCipher) -> RecordStore:
    """Record store with its own id sequences."""
    return RecordStore(cipher=cipher, timeout=5.0)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, store: RecordStore
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_record_store] = lambda: store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_key(db: AsyncSession, user_id: str, scopes: list[str]) -> str:
    from speechpro.auth.security import create_api_key

    _, full_key = await create_api_key(
        db,
        name=f"Test Key {user_id}",
        user_id=user_id,
        scopes=scopes,
    )
    await db.commit()
    return full_key


@pytest_asyncio.fixture
async def auth_headers(db_session: AsyncSession) -> dict:
    """Auth headers for user-a with read and write scopes."""
    full_key = await _make_key(db_session, "user-a", ["read", "write"])
    return {"Authorization": f"Bearer {full_key}"}


@pytest_asyncio.fixture
async def other_auth_headers(db_session: AsyncSession) -> dict:
    """Auth headers for user-b, passed via X-API-Key."""
    full_key = await _make_key(db_session, "user-b", ["read", "write"])
    return {"X-API-Key": full_key}


@pytest_asyncio.fixture
async def read_only_headers(db_session: AsyncSession) -> dict:
    """Auth headers for user-a with the read scope only."""
    full_key = await _make_key(db_session, "user-a", ["read"])
    return {"Authorization": f"Bearer {full_key}"}
