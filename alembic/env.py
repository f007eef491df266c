"""Alembic environment.

Migrations are hand-written SQL; the ORM mirrors are attached as
target_metadata so `alembic check` flags drift (column types included)
between the migrated schema and the models the repositories query.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from config.settings import settings
from src.xp_common.database import Base
from src.xp_conversion.infrastructure import db_models as _conversion_models  # noqa: F401
from src.xp_rates.infrastructure import db_models as _rates_models  # noqa: F401
from src.xp_tier.infrastructure import db_models as _tier_models  # noqa: F401
from src.xp_trade.infrastructure import db_models as _trade_models  # noqa: F401
from src.xp_wallet.infrastructure import db_models as _wallet_models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

_COMMON_OPTS = {"target_metadata": target_metadata, "compare_type": True}


def run_offline() -> None:
    """Emit the SQL script without connecting (alembic upgrade --sql)."""
    context.configure(
        url=settings.DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_COMMON_OPTS,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **_COMMON_OPTS)
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    engine = create_async_engine(settings.DATABASE_URL)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())
