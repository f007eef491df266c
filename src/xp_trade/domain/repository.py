"""TradeOfferStore Protocol.

Status changes go through `transition_status`, a compare-and-set: it only
applies when the row is still in `expected`, and answers None otherwise.
That is what makes a second accept, or a sweep racing a cancel, a no-op.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.enums import OfferStatus
from src.xp_trade.domain.models import TradeOffer, TradeTransaction


class TradeOfferStoreProtocol(Protocol):
    async def insert_offer(self, db: AsyncSession, offer: TradeOffer) -> TradeOffer: ...

    async def get_offer(self, db: AsyncSession, offer_id: str) -> TradeOffer | None: ...

    async def transition_status(
        self,
        db: AsyncSession,
        offer_id: str,
        expected: OfferStatus,
        new_status: OfferStatus,
    ) -> TradeOffer | None: ...

    async def list_open_offers(
        self, db: AsyncSession, exclude_user_id: str | None, now: datetime, limit: int
    ) -> list[TradeOffer]: ...

    async def list_user_offers(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[TradeOffer]: ...

    async def list_expired_active(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[TradeOffer]: ...

    async def insert_trade(
        self, db: AsyncSession, trade: TradeTransaction
    ) -> TradeTransaction: ...

    async def list_user_trades(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[TradeTransaction]: ...
