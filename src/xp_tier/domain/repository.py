"""UserStatsStore Protocol."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_tier.domain.models import UserStats


class UserStatsStoreProtocol(Protocol):
    async def get_stats(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> UserStats | None: ...

    async def ensure_stats(self, db: AsyncSession, user_id: str, period_start: datetime) -> None:
        """Create a zero row if the user has none, so FOR UPDATE always has a row to lock."""
        ...

    async def save_stats(self, db: AsyncSession, stats: UserStats) -> UserStats: ...

    async def list_due_for_rollover(
        self, db: AsyncSession, period_before: datetime, now: datetime
    ) -> list[UserStats]:
        """Rows from an earlier month, or whose tier hold has lapsed."""
        ...
