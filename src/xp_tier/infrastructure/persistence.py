"""UserStatsRepository — concrete UserStatsStoreProtocol over `user_stats`."""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.enums import MembershipTier
from src.xp_common.errors import InternalError
from src.xp_tier.domain.models import UserStats

_COLUMNS = """
    user_id, monthly_points, points_converted, fees_paid, tier,
    period_start, tier_expires_at, created_at, updated_at
"""

_GET_STATS_SQL = text(f"SELECT {_COLUMNS} FROM user_stats WHERE user_id = :user_id")

_GET_STATS_FOR_UPDATE_SQL = text(
    f"SELECT {_COLUMNS} FROM user_stats WHERE user_id = :user_id FOR UPDATE"
)

_ENSURE_STATS_SQL = text("""
    INSERT INTO user_stats (user_id, period_start)
    VALUES (:user_id, :period_start)
    ON CONFLICT (user_id) DO NOTHING
""")

_UPSERT_STATS_SQL = text(f"""
    INSERT INTO user_stats
        (user_id, monthly_points, points_converted, fees_paid, tier,
         period_start, tier_expires_at)
    VALUES
        (:user_id, :monthly_points, :points_converted, :fees_paid, :tier,
         :period_start, :tier_expires_at)
    ON CONFLICT (user_id) DO UPDATE
        SET monthly_points   = EXCLUDED.monthly_points,
            points_converted = EXCLUDED.points_converted,
            fees_paid        = EXCLUDED.fees_paid,
            tier             = EXCLUDED.tier,
            period_start     = EXCLUDED.period_start,
            tier_expires_at  = EXCLUDED.tier_expires_at
    RETURNING {_COLUMNS}
""")

_LIST_DUE_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM user_stats
    WHERE period_start < :period_before
       OR (tier <> 'STANDARD' AND tier_expires_at IS NOT NULL AND tier_expires_at <= :now)
    ORDER BY user_id
    FOR UPDATE SKIP LOCKED
""")


def _row_to_stats(row: object) -> UserStats:
    return UserStats(
        user_id=row.user_id,  # type: ignore[attr-defined]
        monthly_points=row.monthly_points,  # type: ignore[attr-defined]
        points_converted=row.points_converted,  # type: ignore[attr-defined]
        fees_paid=row.fees_paid,  # type: ignore[attr-defined]
        tier=MembershipTier(row.tier),  # type: ignore[attr-defined]
        period_start=row.period_start,  # type: ignore[attr-defined]
        tier_expires_at=row.tier_expires_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class UserStatsRepository:
    async def get_stats(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> UserStats | None:
        sql = _GET_STATS_FOR_UPDATE_SQL if for_update else _GET_STATS_SQL
        row = (await db.execute(sql, {"user_id": user_id})).fetchone()
        return _row_to_stats(row) if row else None

    async def ensure_stats(self, db: AsyncSession, user_id: str, period_start: datetime) -> None:
        await db.execute(_ENSURE_STATS_SQL, {"user_id": user_id, "period_start": period_start})

    async def save_stats(self, db: AsyncSession, stats: UserStats) -> UserStats:
        result = await db.execute(
            _UPSERT_STATS_SQL,
            {
                "user_id": stats.user_id,
                "monthly_points": stats.monthly_points,
                "points_converted": stats.points_converted,
                "fees_paid": stats.fees_paid,
                "tier": MembershipTier(stats.tier).value,
                "period_start": stats.period_start,
                "tier_expires_at": stats.tier_expires_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("user_stats upsert returned no rows")
        return _row_to_stats(row)

    async def list_due_for_rollover(
        self, db: AsyncSession, period_before: datetime, now: datetime
    ) -> list[UserStats]:
        result = await db.execute(_LIST_DUE_SQL, {"period_before": period_before, "now": now})
        return [_row_to_stats(row) for row in result.fetchall()]
