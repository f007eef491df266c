"""Pydantic schemas for the xp_trade API.

Offer and trade views never carry the counterparty's user id; callers see
`is_own` / `role` instead.
"""

from pydantic import BaseModel, Field

from config.settings import settings
from src.xp_common.enums import LoyaltyProgram
from src.xp_trade.domain.models import TradeOffer, TradeTransaction


class CreateOfferRequest(BaseModel):
    from_program: LoyaltyProgram
    to_program: LoyaltyProgram
    amount_offered: int = Field(..., gt=0)
    amount_requested: int = Field(..., gt=0)
    expires_in_days: int = Field(7, ge=1, le=settings.TRADE_OFFER_MAX_DAYS)
    description: str | None = Field(None, max_length=500)


class OfferResponse(BaseModel):
    id: str
    from_program: str
    to_program: str
    amount_offered: int
    amount_requested: int
    custom_rate: str
    market_rate: str | None
    savings_pct: str | None
    status: str
    description: str | None
    created_at: str
    expires_at: str
    is_own: bool

    @classmethod
    def from_domain(cls, offer: TradeOffer, viewer_id: str) -> "OfferResponse":
        return cls(
            id=offer.id,
            from_program=offer.from_program,
            to_program=offer.to_program,
            amount_offered=offer.amount_offered,
            amount_requested=offer.amount_requested,
            custom_rate=str(offer.custom_rate),
            market_rate=str(offer.market_rate) if offer.market_rate is not None else None,
            savings_pct=str(offer.savings_pct) if offer.savings_pct is not None else None,
            status=offer.status.value,
            description=offer.description,
            created_at=offer.created_at.isoformat() if offer.created_at else "",
            expires_at=offer.expires_at.isoformat(),
            is_own=offer.creator_id == viewer_id,
        )


class OfferListResponse(BaseModel):
    items: list[OfferResponse]


class TradeResponse(BaseModel):
    id: str
    offer_id: str
    role: str               # SELLER (offer creator) or BUYER (acceptor)
    from_program: str
    to_program: str
    amount_sold: int
    amount_bought: int
    rate: str
    seller_fee: int
    buyer_fee: int
    facilitation_fee: int
    completed_at: str

    @classmethod
    def from_domain(cls, trade: TradeTransaction, viewer_id: str) -> "TradeResponse":
        return cls(
            id=trade.id,
            offer_id=trade.offer_id,
            role="SELLER" if trade.seller_id == viewer_id else "BUYER",
            from_program=trade.from_program,
            to_program=trade.to_program,
            amount_sold=trade.amount_sold,
            amount_bought=trade.amount_bought,
            rate=str(trade.rate),
            seller_fee=trade.seller_fee,
            buyer_fee=trade.buyer_fee,
            facilitation_fee=trade.facilitation_fee,
            completed_at=trade.completed_at.isoformat() if trade.completed_at else "",
        )


class TradeListResponse(BaseModel):
    items: list[TradeResponse]


class SweepResponse(BaseModel):
    expired: int
