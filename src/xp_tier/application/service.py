"""TierApplicationService — tier status reads and the monthly rollover.

get_tier_status never writes: stats are rolled forward in memory so a user
who has not converted this month sees the current month's numbers.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.datetime_utils import month_start, utc_now
from src.xp_tier.application.schemas import RolloverResponse, TierStatusResponse, bps_to_pct
from src.xp_tier.domain.fee_calculator import allowance_remaining
from src.xp_tier.domain.models import UserStats
from src.xp_tier.domain.policy import next_policy, policy_for
from src.xp_tier.domain.repository import UserStatsStoreProtocol
from src.xp_tier.domain.tier_engine import recompute
from src.xp_tier.infrastructure.persistence import UserStatsRepository

logger = logging.getLogger(__name__)


class TierApplicationService:
    def __init__(
        self,
        repo: UserStatsStoreProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: UserStatsStoreProtocol = repo or UserStatsRepository()
        self._clock = clock

    async def get_tier_status(self, db: AsyncSession, user_id: str) -> TierStatusResponse:
        now = self._clock()
        stored = await self._repo.get_stats(db, user_id)
        stats = recompute(stored or UserStats(user_id=user_id), now)

        policy = policy_for(stats.tier)
        remaining = allowance_remaining(stats.tier, stats.monthly_points)
        used = (
            stats.monthly_points
            if policy.allowance is None
            else min(stats.monthly_points, policy.allowance)
        )
        upcoming = next_policy(stats.tier)
        return TierStatusResponse(
            user_id=user_id,
            tier=stats.tier.value,
            monthly_points=stats.monthly_points,
            points_converted=stats.points_converted,
            fees_paid=stats.fees_paid,
            period_start=stats.period_start.isoformat() if stats.period_start else "",
            tier_expires_at=stats.tier_expires_at.isoformat() if stats.tier_expires_at else None,
            allowance=policy.allowance,
            allowance_used=used,
            allowance_remaining=remaining,
            conversion_fee_bps=policy.conversion_fee_bps,
            conversion_fee_pct=bps_to_pct(policy.conversion_fee_bps),
            p2p_fee_min_pct=bps_to_pct(policy.p2p_min_bps),
            p2p_fee_max_pct=bps_to_pct(policy.p2p_max_bps),
            next_tier=upcoming.tier.value if upcoming else None,
            points_to_next_tier=(
                max(0, upcoming.threshold - stats.monthly_points) if upcoming else None
            ),
        )

    async def rollover(self, db: AsyncSession, now: datetime | None = None) -> RolloverResponse:
        """Roll every stale row into the current month. Safe to call repeatedly."""
        now = now or self._clock()
        period = month_start(now)
        try:
            due = await self._repo.list_due_for_rollover(db, period, now)
            updated = 0
            for stats in due:
                rolled = recompute(stats, now)
                if rolled != stats:
                    await self._repo.save_stats(db, rolled)
                    updated += 1
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Tier rollover for %s: %d rows updated", period.date().isoformat(), updated)
        return RolloverResponse(rows_updated=updated, period_start=period.isoformat())
