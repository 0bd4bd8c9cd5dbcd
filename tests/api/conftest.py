"""API test fixtures — async SQLite database + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - The app is built by create_app() with an injected DatabaseSessionManager,
      so no dependency overrides or module patching are needed

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - ASGITransport does not run the lifespan: the injected manager is already
      on app.state, and lifespan behavior is tested separately
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from movie_api.config import Settings
from movie_api.db.base import Base
from movie_api.infrastructure.database import DatabaseSessionManager
from movie_api.main import create_app
from movie_api.models.movie import Movie


@pytest.fixture
def settings():
    return Settings(_env_file=None, database_url="sqlite+aiosqlite:///:memory:")


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
def db_manager(test_engine):
    return DatabaseSessionManager(test_engine)


@pytest.fixture
def app(settings, db_manager):
    return create_app(settings, db_manager)


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def seed_movie(db_manager):
    """Insert one movie directly into the test DB."""
    async with db_manager.session() as db:
        movie = Movie(name="Alien", time=["20:00", "22:30"], rating=8.5)
        db.add(movie)
        await db.commit()
        await db.refresh(movie)
        return movie
