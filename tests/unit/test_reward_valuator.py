"""Tests for xp_rewards valuation."""

from decimal import Decimal

import pytest

from src.xp_common.enums import LoyaltyProgram
from src.xp_common.errors import ValidationError
from src.xp_rewards.domain.catalog import POINT_VALUES, STANDARD_REWARDS
from src.xp_rewards.domain.valuator import points_cost, valuate


class TestCatalog:
    def test_every_program_has_a_value(self) -> None:
        assert set(POINT_VALUES) == set(LoyaltyProgram)

    def test_ten_rewards(self) -> None:
        assert len(STANDARD_REWARDS) == 10


class TestPointsCost:
    def test_rounds_half_up(self) -> None:
        flight = STANDARD_REWARDS[0]  # $250
        # 250 / 0.006 = 41666.67
        assert points_cost(flight, LoyaltyProgram.QANTAS) == 41_667

    def test_exact(self) -> None:
        flight = STANDARD_REWARDS[0]
        assert points_cost(flight, LoyaltyProgram.XPOINTS) == 25_000


class TestValuate:
    def test_cash_value(self) -> None:
        result = valuate("QANTAS", 12_500)
        assert result.point_value == Decimal("0.006")
        assert result.cash_value == Decimal("75.00")

    def test_affordable_most_expensive_first(self) -> None:
        result = valuate(LoyaltyProgram.QANTAS, 12_500)
        assert [p.points_required for p in result.affordable] == [6667, 5000]

    def test_upcoming_cheapest_first_with_progress(self) -> None:
        result = valuate(LoyaltyProgram.QANTAS, 12_500, limit_upcoming=2)
        assert [u.points_required for u in result.upcoming] == [16_667, 25_000]
        assert result.upcoming[1].points_needed == 12_500
        assert result.upcoming[1].progress == Decimal("0.5")

    def test_every_reward_lands_in_one_list(self) -> None:
        result = valuate(LoyaltyProgram.GYG, 40_000)
        assert len(result.affordable) + len(result.upcoming) == len(STANDARD_REWARDS)

    def test_zero_balance(self) -> None:
        result = valuate(LoyaltyProgram.XPOINTS, 0)
        assert result.affordable == []
        assert all(u.progress == 0 for u in result.upcoming)

    def test_large_balance_affords_everything(self) -> None:
        result = valuate(LoyaltyProgram.HILTON, 10_000_000)
        assert len(result.affordable) == 10
        assert result.upcoming == []

    def test_negative_balance_rejected(self) -> None:
        with pytest.raises(ValidationError):
            valuate(LoyaltyProgram.QANTAS, -1)

    def test_unknown_program_rejected(self) -> None:
        with pytest.raises(ValidationError):
            valuate("NOPE", 100)
