"""Domain models for xp_trade — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.xp_common.datetime_utils import ensure_utc
from src.xp_common.enums import OfferStatus


@dataclass
class TradeOffer:
    """Creator gives `amount_offered` of from_program for `amount_requested`
    of to_program. amount_offered sits in the creator's escrow while ACTIVE."""

    id: str
    creator_id: str
    from_program: str
    to_program: str
    amount_offered: int
    amount_requested: int
    custom_rate: Decimal              # to_program points per from_program point
    market_rate: Decimal | None       # None when no rate resolved at creation
    savings_pct: Decimal | None       # (market - custom) / market * 100
    expires_at: datetime
    status: OfferStatus = OfferStatus.ACTIVE
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return ensure_utc(self.expires_at) <= ensure_utc(now)


@dataclass
class TradeTransaction:
    id: str
    offer_id: str
    seller_id: str          # offer creator
    buyer_id: str           # acceptor
    from_program: str
    to_program: str
    amount_sold: int        # from_program points leaving the seller's escrow
    amount_bought: int      # to_program points leaving the buyer's wallet
    rate: Decimal
    seller_fee: int         # from_program points, withheld from the buyer's proceeds
    buyer_fee: int          # to_program points, withheld from the seller's proceeds
    completed_at: datetime | None = None

    @property
    def facilitation_fee(self) -> int:
        return self.seller_fee + self.buyer_fee
