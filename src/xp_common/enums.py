"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum

from src.xp_common.errors import ValidationError


class LoyaltyProgram(str, Enum):
    QANTAS = "QANTAS"
    GYG = "GYG"
    XPOINTS = "XPOINTS"
    VELOCITY = "VELOCITY"
    AMEX = "AMEX"
    FLYBUYS = "FLYBUYS"
    HILTON = "HILTON"
    MARRIOTT = "MARRIOTT"
    AIRBNB = "AIRBNB"
    DELTA = "DELTA"


# Universal currency every program can convert through
HUB_PROGRAM = LoyaltyProgram.XPOINTS


class MembershipTier(str, Enum):
    STANDARD = "STANDARD"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


class TransactionStatus(str, Enum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class OfferStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class RatePath(str, Enum):
    IDENTITY = "IDENTITY"
    DIRECT = "DIRECT"
    VIA_HUB = "VIA_HUB"


class RewardType(str, Enum):
    FLIGHT = "flight"
    HOTEL = "hotel"
    DINING = "dining"
    SHOPPING = "shopping"
    EXPERIENCE = "experience"


def parse_program(value: str | LoyaltyProgram, field: str = "program") -> LoyaltyProgram:
    """Coerce a raw program code into LoyaltyProgram, rejecting unknown codes."""
    if isinstance(value, LoyaltyProgram):
        return value
    try:
        return LoyaltyProgram(str(value).upper())
    except ValueError:
        raise ValidationError(field, f"unknown loyalty program {value!r}") from None
