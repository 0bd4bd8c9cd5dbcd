"""Database Session Manager — verifies the error channel and connectivity check.

Invariants:
    - DBAPI errors raised on the engine reach the error sink
    - The default sink logs "MongoDB connection error: <error>" at ERROR
    - A failing sink is logged and never propagates
    - connect() reports failures as a result instead of raising
    - session() maps SQLAlchemy errors to DatabaseError
"""

import logging

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine

from movie_api.core.errors import DatabaseError
from movie_api.infrastructure.database import (
    ConnectionResult, DatabaseSessionManager, log_connection_error,
)


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    yield engine
    await engine.dispose()


def test_default_sink_logs_connection_error(caplog):
    caplog.set_level(logging.ERROR)
    log_connection_error(ConnectionRefusedError("connection refused"))

    record = caplog.records[-1]
    assert record.levelno == logging.ERROR
    assert "MongoDB connection error:" in record.getMessage()
    assert "connection refused" in record.getMessage()


async def test_report_error_uses_default_sink(engine, caplog):
    caplog.set_level(logging.ERROR)
    manager = DatabaseSessionManager(engine)

    manager.report_error(Exception("connection refused"))

    messages = [r.getMessage() for r in caplog.records]
    assert any(
        "MongoDB connection error:" in m and "connection refused" in m
        for m in messages
    )


async def test_engine_errors_reach_sink(engine):
    seen = []
    DatabaseSessionManager(engine, on_error=seen.append)

    async with engine.connect() as conn:
        with pytest.raises(OperationalError):
            await conn.execute(text("SELECT * FROM no_such_table"))

    assert any("no_such_table" in str(e) for e in seen)


async def test_failing_sink_does_not_propagate(engine, caplog):
    def broken_sink(error):
        raise RuntimeError("sink down")

    manager = DatabaseSessionManager(engine, on_error=broken_sink)
    manager.report_error(Exception("connection refused"))

    assert any("sink failed" in r.getMessage() for r in caplog.records)


async def test_connect_reports_success(engine):
    manager = DatabaseSessionManager(engine)
    assert await manager.connect() == ConnectionResult(ok=True)
    assert await manager.health_check() is True


async def test_connect_reports_failure_without_raising(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'movies.db'}"
    manager = DatabaseSessionManager.from_url(url, on_error=lambda e: None)

    result = await manager.connect()

    assert result.ok is False
    assert result.error
    assert await manager.health_check() is False
    await manager.dispose()


async def test_session_maps_operational_error(engine):
    manager = DatabaseSessionManager(engine, on_error=lambda e: None)

    with pytest.raises(DatabaseError) as exc_info:
        async with manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))

    assert exc_info.value.operation == "execute"
    assert exc_info.value.http_status == 503


async def test_create_schema_creates_movies_table(engine):
    manager = DatabaseSessionManager(engine)
    await manager.create_schema()

    async with manager.session() as db:
        result = await db.execute(text("SELECT COUNT(*) FROM movies"))
        assert result.scalar_one() == 0
