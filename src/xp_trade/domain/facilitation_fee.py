"""Peer-to-peer facilitation fee.

The platform takes a share of what the acceptor saves against the market
rate, bounded by the acceptor's tier:

    fee_rate   = clamp(savings_pct * share_pct / 100 / 100, tier min, tier max)
    seller_fee = ceil(amount_offered   * fee_rate)
    buyer_fee  = ceil(amount_requested * fee_rate)

Offers at or above market (savings <= 0), or with no market rate at all,
pay the tier minimum.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.xp_common.enums import MembershipTier
from src.xp_common.points import BPS_DENOMINATOR, fee_from_rate
from src.xp_tier.domain.policy import TIER_POLICIES, policy_for

_RATE_QUANT = Decimal("0.0000000001")
_PCT_QUANT = Decimal("0.0001")
_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class TradeFees:
    fee_rate: Decimal
    seller_fee: int
    buyer_fee: int

    @property
    def total(self) -> int:
        return self.seller_fee + self.buyer_fee


def custom_rate(amount_offered: int, amount_requested: int) -> Decimal:
    return (Decimal(amount_requested) / Decimal(amount_offered)).quantize(_RATE_QUANT)


def savings_pct(market_rate: Decimal | None, offer_rate: Decimal) -> Decimal | None:
    if market_rate is None or market_rate <= 0:
        return None
    return ((market_rate - offer_rate) / market_rate * _HUNDRED).quantize(_PCT_QUANT)


def facilitation_fee_rate(
    savings: Decimal | None,
    tier: MembershipTier | str,
    share_pct: int | Decimal,
) -> Decimal:
    policy = policy_for(tier)
    floor = Decimal(policy.p2p_min_bps) / BPS_DENOMINATOR
    ceiling = Decimal(policy.p2p_max_bps) / BPS_DENOMINATOR
    if savings is None:
        return floor
    raw = savings * Decimal(share_pct) / _HUNDRED / _HUNDRED
    return min(max(raw, floor), ceiling)


def trade_fees(amount_offered: int, amount_requested: int, fee_rate: Decimal) -> TradeFees:
    return TradeFees(
        fee_rate=fee_rate,
        seller_fee=fee_from_rate(amount_offered, fee_rate),
        buyer_fee=fee_from_rate(amount_requested, fee_rate),
    )


def max_fee_rate() -> Decimal:
    """Highest facilitation rate any tier can be charged."""
    return Decimal(max(p.p2p_max_bps for p in TIER_POLICIES)) / BPS_DENOMINATOR
