"""Integer arithmetic utilities for points.

Balances, amounts and fees are int points. Exchange rates are Decimal and
the product is floored back to whole points.
"""

from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal

from src.xp_common.errors import ValidationError

BPS_DENOMINATOR = 10000


def validate_amount(amount: int, field: str = "amount") -> None:
    """Validate that amount is a positive whole number of points."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(field, f"must be a whole number of points, got {amount!r}")
    if amount <= 0:
        raise ValidationError(field, f"must be positive, got {amount}")


def points_to_display(points: int) -> str:
    """Format points with thousands separators: 12000 -> '12,000 pts'."""
    return f"{points:,} pts"


def calculate_fee(amount: int, fee_rate_bps: int) -> int:
    """Calculate fee with ceiling division (platform never under-charges).

    fee = ceil(amount * fee_rate_bps / 10000)
    Using integer ceiling: (a + b - 1) // b
    """
    if amount == 0 or fee_rate_bps == 0:
        return 0
    return (amount * fee_rate_bps + BPS_DENOMINATOR - 1) // BPS_DENOMINATOR


def fee_from_rate(amount: int, fee_rate: Decimal) -> int:
    """Ceiling fee for a fractional rate (0.015 == 1.5%)."""
    if amount == 0 or fee_rate <= 0:
        return 0
    return int((Decimal(amount) * fee_rate).to_integral_value(rounding=ROUND_CEILING))


def apply_rate(amount: int, rate: Decimal) -> int:
    """floor(amount * rate) in whole points."""
    return int((Decimal(amount) * rate).to_integral_value(rounding=ROUND_FLOOR))
