"""Pure conversion pricing.

    fee       = tier fee on the part of `amount` past the monthly allowance
    amount_to = floor((amount - fee) * rate)
"""

from decimal import Decimal

from src.xp_common.enums import MembershipTier
from src.xp_common.errors import ValidationError
from src.xp_common.points import apply_rate
from src.xp_conversion.domain.models import ConversionPricing
from src.xp_tier.domain.fee_calculator import compute_fee


def price_conversion(
    amount: int,
    rate: Decimal,
    tier: MembershipTier | str,
    monthly_points_so_far: int,
) -> ConversionPricing:
    fee = compute_fee(amount, tier, monthly_points_so_far)
    amount_to = apply_rate(amount - fee, rate)
    if amount_to <= 0:
        raise ValidationError("amount", f"{amount} points is too small to convert at rate {rate}")
    return ConversionPricing(amount=amount, fee=fee, amount_to=amount_to, rate=rate)
