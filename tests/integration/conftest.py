"""Integration-test fixtures.

Pre-condition: PostgreSQL and Redis up, `alembic upgrade head` applied.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

from collections.abc import AsyncIterator
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from config.settings import settings
from src.main import app
from src.xp_common.database import async_session_factory, engine
from tests.integration.helpers import ADMIN_ID, auth_headers

# Re-stamp the newest rate of every pair so the snapshot is fresh for this run.
_RESTAMP_RATES_SQL = text("""
    INSERT INTO exchange_rates (from_program, to_program, rate, source)
    SELECT DISTINCT ON (from_program, to_program) from_program, to_program, rate, 'test'
    FROM exchange_rates
    ORDER BY from_program, to_program, as_of DESC
""")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncIterator[AsyncClient]:
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        pytest.skip(f"PostgreSQL not reachable: {exc}")

    async with async_session_factory() as session:
        await session.execute(_RESTAMP_RATES_SQL)
        await session.commit()

    with patch.object(settings, "ADMIN_USER_IDS", [ADMIN_ID]):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/api/v1/admin/rates/refresh", headers=auth_headers(ADMIN_ID))
            assert resp.status_code == 200, resp.text
            yield ac
