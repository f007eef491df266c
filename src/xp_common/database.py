from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings
from src.xp_common.errors import ConcurrencyConflictError

# lock_not_available, serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = frozenset({"55P03", "40001", "40P01"})


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


async def set_lock_timeout(db: AsyncSession, timeout_ms: int) -> None:
    """Bound row-lock waits for the current transaction (SET LOCAL)."""
    await db.execute(text(f"SET LOCAL lock_timeout = '{int(timeout_ms)}ms'"))


def is_retryable_db_error(exc: BaseException) -> bool:
    """True for lock timeouts, serialization failures and deadlocks."""
    if not isinstance(exc, DBAPIError):
        return False
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in _RETRYABLE_SQLSTATES


@asynccontextmanager
async def translate_db_errors() -> AsyncIterator[None]:
    """Re-raise lock timeouts / serialization failures / deadlocks as
    ConcurrencyConflictError so callers can retry the whole unit."""
    try:
        yield
    except DBAPIError as exc:
        if is_retryable_db_error(exc):
            raise ConcurrencyConflictError() from exc
        raise
