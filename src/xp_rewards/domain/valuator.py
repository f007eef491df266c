"""RewardValuator — what a balance is worth in rewards. Pure, no I/O."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from src.xp_common.enums import LoyaltyProgram, parse_program
from src.xp_common.errors import ValidationError
from src.xp_rewards.domain.catalog import POINT_VALUES, STANDARD_REWARDS, Reward

_PROGRESS_QUANT = Decimal("0.0001")
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PricedReward:
    reward: Reward
    points_required: int


@dataclass(frozen=True)
class UpcomingReward:
    reward: Reward
    points_required: int
    points_needed: int
    progress: Decimal       # 0..1


@dataclass(frozen=True)
class RewardValuation:
    program: LoyaltyProgram
    balance: int
    point_value: Decimal
    cash_value: Decimal
    affordable: list[PricedReward]
    upcoming: list[UpcomingReward]


def points_cost(reward: Reward, program: LoyaltyProgram) -> int:
    """round(cash_value / point_value), halves rounded up."""
    cost = reward.cash_value / POINT_VALUES[program]
    return int(cost.to_integral_value(rounding=ROUND_HALF_UP))


def valuate(
    program: str | LoyaltyProgram,
    balance: int,
    limit_upcoming: int | None = None,
) -> RewardValuation:
    code = parse_program(program)
    if isinstance(balance, bool) or not isinstance(balance, int) or balance < 0:
        raise ValidationError("balance", f"must be a non-negative whole number, got {balance!r}")

    priced = [PricedReward(r, points_cost(r, code)) for r in STANDARD_REWARDS]
    affordable = sorted(
        (p for p in priced if p.points_required <= balance),
        key=lambda p: p.points_required,
        reverse=True,
    )
    upcoming = sorted(
        (
            UpcomingReward(
                reward=p.reward,
                points_required=p.points_required,
                points_needed=p.points_required - balance,
                progress=min(
                    (Decimal(balance) / p.points_required).quantize(_PROGRESS_QUANT),
                    Decimal(1),
                ),
            )
            for p in priced
            if p.points_required > balance
        ),
        key=lambda u: u.points_required,
    )
    if limit_upcoming is not None:
        upcoming = upcoming[:limit_upcoming]

    point_value = POINT_VALUES[code]
    return RewardValuation(
        program=code,
        balance=balance,
        point_value=point_value,
        cash_value=(point_value * balance).quantize(_CENTS),
        affordable=affordable,
        upcoming=upcoming,
    )
