from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.db import engine_options, get_session
from app.main import app
from app.models import SQLModel
from app.models.enums import UserRole
from app.services.user import InMemoryUserDirectory, UserInfo, set_user_directory

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
MANAGER_ID = "manager-1"
SECOND_MANAGER_ID = "manager-2"
UNREGISTERED_ID = "ghost"


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Create a fresh file-backed SQLite database for each test.

    Each session gets its own connection, so tests see the same commit
    boundaries the API has against a real server.
    """
    url = f"sqlite+aiosqlite:///{tmp_path / 'toil.db'}"
    _engine = create_async_engine(url, poolclass=NullPool, **engine_options(url))
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """A session for arranging and inspecting rows directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def user_directory() -> Iterator[InMemoryUserDirectory]:
    """Seed the in-memory user directory for every test."""
    directory = InMemoryUserDirectory()
    directory.seed(UserInfo(id=USER_ID, name="Uma User", email="uma@example.com", role=UserRole.USER))
    directory.seed(UserInfo(id=OTHER_USER_ID, name="Otto Other", email="otto@example.com", role=UserRole.USER))
    directory.seed(UserInfo(id=MANAGER_ID, name="Mia Manager", email="mia@example.com", role=UserRole.MANAGER))
    directory.seed(
        UserInfo(id=SECOND_MANAGER_ID, name="Max Manager", email="max@example.com", role=UserRole.MANAGER)
    )
    set_user_directory(directory)
    yield directory
    set_user_directory(InMemoryUserDirectory())


@pytest.fixture
def asgi_transport(session_factory: async_sessionmaker[AsyncSession]) -> Iterator[ASGITransport]:
    """ASGI transport with the database dependency pointed at the test database."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    yield ASGITransport(app=app)
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(asgi_transport: ASGITransport) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the app."""
    async with AsyncClient(transport=asgi_transport, base_url="http://test") as client:
        yield client
