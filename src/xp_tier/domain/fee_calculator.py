"""Conversion fee: free up to the tier's monthly allowance, then a flat
basis-point rate on the excess only.

    excess = clamp(so_far + amount - allowance, 0, amount)
    fee    = ceil(excess * bps / 10000)
"""

from src.xp_common.enums import MembershipTier
from src.xp_common.points import calculate_fee
from src.xp_tier.domain.policy import policy_for


def fee_bearing_amount(amount: int, tier: MembershipTier | str, monthly_points_so_far: int) -> int:
    allowance = policy_for(tier).allowance
    if allowance is None:
        return 0
    excess = monthly_points_so_far + amount - allowance
    return max(0, min(excess, amount))


def compute_fee(amount: int, tier: MembershipTier | str, monthly_points_so_far: int) -> int:
    excess = fee_bearing_amount(amount, tier, monthly_points_so_far)
    return calculate_fee(excess, policy_for(tier).conversion_fee_bps)


def allowance_remaining(tier: MembershipTier | str, monthly_points_so_far: int) -> int | None:
    """None when the tier's allowance is unlimited."""
    allowance = policy_for(tier).allowance
    if allowance is None:
        return None
    return max(0, allowance - monthly_points_so_far)
