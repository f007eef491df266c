"""Admin application service — scheduler and operator entry points.

All operations here are idempotent so the external scheduler can retry
them freely.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_rates.application.service import RateApplicationService
from src.xp_tier.application.service import TierApplicationService
from src.xp_trade.application.schemas import SweepResponse
from src.xp_trade.application.service import TradeOfferBook
from src.xp_wallet.application.service import WalletApplicationService


class AdminService:
    def __init__(
        self,
        book: TradeOfferBook | None = None,
        tiers: TierApplicationService | None = None,
        rates: RateApplicationService | None = None,
        wallets: WalletApplicationService | None = None,
    ) -> None:
        self._book = book or TradeOfferBook()
        self._tiers = tiers or TierApplicationService()
        self._rates = rates or RateApplicationService()
        self._wallets = wallets or WalletApplicationService()

    async def sweep_expired_offers(self, db: AsyncSession) -> dict[str, Any]:
        expired = await self._book.sweep_expired(db)
        return SweepResponse(expired=expired).model_dump()

    async def rollover_tiers(self, db: AsyncSession) -> dict[str, Any]:
        return (await self._tiers.rollover(db)).model_dump()

    async def refresh_rates(self, db: AsyncSession) -> dict[str, Any]:
        return (await self._rates.refresh(db)).model_dump()

    async def credit_wallet(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> dict[str, Any]:
        item = await self._wallets.credit(db, user_id, program, amount)
        return {"user_id": user_id, **item.model_dump()}
