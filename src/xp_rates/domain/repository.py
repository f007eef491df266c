"""RateFeed Protocol — source of exchange rates written by the external feed."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_rates.domain.models import ExchangeRate


class RateFeedProtocol(Protocol):
    async def load_latest_rates(self, db: AsyncSession) -> list[ExchangeRate]: ...
