"""Static rewards catalogue and per-program point values (AUD per point)."""

from dataclasses import dataclass
from decimal import Decimal

from src.xp_common.enums import LoyaltyProgram, RewardType


@dataclass(frozen=True, slots=True)
class Reward:
    type: RewardType
    description: str
    cash_value: Decimal


POINT_VALUES: dict[LoyaltyProgram, Decimal] = {
    LoyaltyProgram.QANTAS: Decimal("0.006"),
    LoyaltyProgram.GYG: Decimal("0.008"),
    LoyaltyProgram.XPOINTS: Decimal("0.01"),
    LoyaltyProgram.VELOCITY: Decimal("0.007"),
    LoyaltyProgram.AMEX: Decimal("0.009"),
    LoyaltyProgram.FLYBUYS: Decimal("0.005"),
    LoyaltyProgram.HILTON: Decimal("0.004"),
    LoyaltyProgram.MARRIOTT: Decimal("0.006"),
    LoyaltyProgram.AIRBNB: Decimal("0.0095"),
    LoyaltyProgram.DELTA: Decimal("0.0065"),
}

STANDARD_REWARDS: tuple[Reward, ...] = (
    Reward(RewardType.FLIGHT, "A domestic one-way flight", Decimal(250)),
    Reward(RewardType.FLIGHT, "A return trip to Bali", Decimal(800)),
    Reward(RewardType.HOTEL, "One night at a luxury hotel", Decimal(400)),
    Reward(RewardType.HOTEL, "A weekend getaway (2 nights)", Decimal(600)),
    Reward(RewardType.DINING, "A fancy dinner for two", Decimal(150)),
    Reward(RewardType.DINING, "A free lunch", Decimal(30)),
    Reward(RewardType.SHOPPING, "A $100 shopping voucher", Decimal(100)),
    Reward(RewardType.SHOPPING, "A new premium smartphone", Decimal(1000)),
    Reward(RewardType.EXPERIENCE, "Movie tickets for two", Decimal(40)),
    Reward(RewardType.EXPERIENCE, "A hot air balloon ride", Decimal(350)),
)
