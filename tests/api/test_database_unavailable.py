"""Database Unavailable — verifies the server keeps answering when the database fails.

Invariants:
    - Routes touching the database answer 503 DATABASE_ERROR, not a crash
    - Liveness and preflight keep answering normally
    - Readiness reports the failure without gating anything
    - Every failure reaches the database error log
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from movie_api.infrastructure.database import DatabaseSessionManager
from movie_api.main import create_app


@pytest.fixture
async def broken_client(settings, tmp_path):
    """Client whose database lives in a directory that does not exist."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'movies.db'}"
    manager = DatabaseSessionManager.from_url(url)
    app = create_app(settings, manager)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    await manager.dispose()


async def test_database_route_returns_503(broken_client):
    res = await broken_client.get("/api/movies")
    assert res.status_code == 503
    assert res.json()["error"]["code"] == "DATABASE_ERROR"


async def test_unrelated_requests_still_answered(broken_client):
    await broken_client.get("/api/movies")

    assert (await broken_client.get("/api/health/")).status_code == 200
    assert (await broken_client.options("/api/movies")).status_code == 204
    # Repeated failures never take the server down
    assert (await broken_client.get("/api/movies")).status_code == 503


async def test_readiness_reports_database_unavailable(broken_client):
    res = await broken_client.get("/api/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"


async def test_failure_is_logged_as_connection_error(broken_client, caplog):
    caplog.set_level(logging.ERROR)
    await broken_client.get("/api/movies")
    assert any(
        "MongoDB connection error:" in r.getMessage() for r in caplog.records
    )
