"""RateFeedRepository — reads the `exchange_rates` table.

The table is append-only history written by the external rate feed; only
the newest row per pair is loaded.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_rates.domain.models import ExchangeRate

_LATEST_RATES_SQL = text("""
    SELECT DISTINCT ON (from_program, to_program)
           from_program, to_program, rate, as_of
    FROM exchange_rates
    ORDER BY from_program, to_program, as_of DESC
""")


class RateFeedRepository:
    async def load_latest_rates(self, db: AsyncSession) -> list[ExchangeRate]:
        result = await db.execute(_LATEST_RATES_SQL)
        return [
            ExchangeRate(
                from_program=row.from_program,
                to_program=row.to_program,
                rate=row.rate,
                as_of=row.as_of,
            )
            for row in result.fetchall()
        ]
