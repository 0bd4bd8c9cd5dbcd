"""Database Session Manager — async connection pool, error channel, and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions raised inside a session map to DatabaseError
    - Every DBAPI error the engine sees (connect-time included) reaches the error sink
    - The default sink writes "MongoDB connection error: <error>" at ERROR
    - The error sink only reports: no retry, no reconnect, no request gating

Design Decisions:
    - Manager is built by the app factory and stored on app.state, never a
      module-level singleton, so tests can hand in a manager over SQLite
    - connect() returns a ConnectionResult instead of raising: startup decides
      whether an unreachable database is fatal (it is not)
    - Pool sizing only for server databases: SQLite engines use a static pool
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator, Callable

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.engine import ExceptionContext
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from movie_api.core.errors import DatabaseError
from movie_api.db.base import Base
import movie_api.models  # noqa: F401 — registers tables on Base.metadata

logger = logging.getLogger(__name__)

ErrorSink = Callable[[BaseException], None]


@dataclass(frozen=True)
class ConnectionResult:
    """Outcome of a connectivity check."""
    ok: bool
    error: str | None = None


def log_connection_error(error: BaseException) -> None:
    """Default error sink: one ERROR line per database error."""
    logger.error(f"MongoDB connection error: {error}")


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(self, engine: AsyncEngine, on_error: ErrorSink = log_connection_error):
        self.engine = engine
        self._on_error = on_error
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        event.listen(self.engine.sync_engine, "handle_error", self._handle_error)

    @classmethod
    def from_url(
        cls,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        on_error: ErrorSink = log_connection_error,
    ) -> "DatabaseSessionManager":
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        return cls(create_async_engine(database_url, **engine_kwargs), on_error)

    def _handle_error(self, context: ExceptionContext) -> None:
        self.report_error(context.original_exception)

    def report_error(self, error: BaseException) -> None:
        """Forward an error to the sink. A failing sink never breaks the caller."""
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Database error sink failed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise DatabaseError("Integrity constraint violated", "commit")
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise DatabaseError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise DatabaseError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown")
        finally:
            await session.close()

    async def connect(self) -> ConnectionResult:
        """Check connectivity with SELECT 1."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            return ConnectionResult(ok=False, error=str(e))
        return ConnectionResult(ok=True)

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness checks)."""
        result = await self.connect()
        if not result.ok:
            logger.error(f"DB health check failed: {result.error}")
        return result.ok

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    manager: DatabaseSessionManager | None = getattr(
        request.app.state, "db_manager", None,
    )
    if not manager:
        raise DatabaseError("Database not initialized", "connect")
    async with manager.session() as session:
        yield session
