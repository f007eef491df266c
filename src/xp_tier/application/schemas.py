"""Pydantic schemas for the xp_tier API."""

from decimal import Decimal

from pydantic import BaseModel

from src.xp_common.points import BPS_DENOMINATOR


def bps_to_pct(bps: int) -> str:
    """50 -> '0.50'"""
    return str((Decimal(bps) * 100 / BPS_DENOMINATOR).quantize(Decimal("0.01")))


class TierStatusResponse(BaseModel):
    user_id: str
    tier: str
    monthly_points: int
    points_converted: int
    fees_paid: int
    period_start: str
    tier_expires_at: str | None
    allowance: int | None                # None = unlimited
    allowance_used: int
    allowance_remaining: int | None
    conversion_fee_bps: int
    conversion_fee_pct: str
    p2p_fee_min_pct: str
    p2p_fee_max_pct: str
    next_tier: str | None
    points_to_next_tier: int | None


class RolloverResponse(BaseModel):
    rows_updated: int
    period_start: str
