"""Tests for TierApplicationService with a mocked stats repository."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.xp_common.enums import MembershipTier
from src.xp_tier.application.service import TierApplicationService
from src.xp_tier.domain.models import UserStats

NOW = datetime(2026, 5, 10, 12, 0, tzinfo=UTC)
THIS_MONTH = datetime(2026, 5, 1, tzinfo=UTC)
LAST_MONTH = datetime(2026, 4, 1, tzinfo=UTC)


def _make_db() -> MagicMock:
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def repo() -> MagicMock:
    mock = MagicMock()
    mock.get_stats = AsyncMock(return_value=None)
    mock.save_stats = AsyncMock(side_effect=lambda db, stats: stats)
    mock.list_due_for_rollover = AsyncMock(return_value=[])
    return mock


class TestGetTierStatus:
    async def test_new_user_defaults(self, repo: MagicMock) -> None:
        svc = TierApplicationService(repo=repo, clock=lambda: NOW)
        status = await svc.get_tier_status(_make_db(), "u1")
        assert status.tier == "STANDARD"
        assert status.monthly_points == 0
        assert status.allowance == 10_000
        assert status.allowance_remaining == 10_000
        assert status.conversion_fee_pct == "0.50"
        assert status.p2p_fee_min_pct == "0.50"
        assert status.p2p_fee_max_pct == "3.00"
        assert status.next_tier == "SILVER"
        assert status.points_to_next_tier == 20_000
        assert status.period_start == THIS_MONTH.isoformat()

    async def test_allowance_used_is_capped(self, repo: MagicMock) -> None:
        repo.get_stats.return_value = UserStats(
            user_id="u1", monthly_points=12_000, period_start=THIS_MONTH
        )
        svc = TierApplicationService(repo=repo, clock=lambda: NOW)
        status = await svc.get_tier_status(_make_db(), "u1")
        assert status.allowance_used == 10_000
        assert status.allowance_remaining == 0
        assert status.points_to_next_tier == 8000

    async def test_stale_month_shown_rolled(self, repo: MagicMock) -> None:
        repo.get_stats.return_value = UserStats(
            user_id="u1", monthly_points=12_000, period_start=LAST_MONTH
        )
        svc = TierApplicationService(repo=repo, clock=lambda: NOW)
        status = await svc.get_tier_status(_make_db(), "u1")
        assert status.monthly_points == 0
        repo.save_stats.assert_not_awaited()

    async def test_platinum_unlimited(self, repo: MagicMock) -> None:
        repo.get_stats.return_value = UserStats(
            user_id="u1", monthly_points=120_000, period_start=THIS_MONTH
        )
        svc = TierApplicationService(repo=repo, clock=lambda: NOW)
        status = await svc.get_tier_status(_make_db(), "u1")
        assert status.tier == "PLATINUM"
        assert status.allowance is None
        assert status.allowance_remaining is None
        assert status.next_tier is None


class TestRollover:
    async def test_only_changed_rows_saved(self, repo: MagicMock) -> None:
        repo.list_due_for_rollover.return_value = [
            UserStats(user_id="u1", monthly_points=8000, period_start=LAST_MONTH),
            UserStats(user_id="u2", monthly_points=0, period_start=THIS_MONTH),
        ]
        db = _make_db()
        svc = TierApplicationService(repo=repo, clock=lambda: NOW)
        result = await svc.rollover(db)
        assert result.rows_updated == 1
        saved = repo.save_stats.await_args.args[1]
        assert saved.user_id == "u1"
        assert saved.monthly_points == 0
        db.commit.assert_awaited_once()

    async def test_lapsed_hold_is_dropped(self, repo: MagicMock) -> None:
        repo.list_due_for_rollover.return_value = [
            UserStats(
                user_id="u1",
                tier=MembershipTier.GOLD,
                period_start=THIS_MONTH,
                tier_expires_at=NOW - timedelta(days=1),
            ),
        ]
        svc = TierApplicationService(repo=repo, clock=lambda: NOW)
        await svc.rollover(_make_db())
        assert repo.save_stats.await_args.args[1].tier == MembershipTier.STANDARD

    async def test_nothing_due(self, repo: MagicMock) -> None:
        svc = TierApplicationService(repo=repo, clock=lambda: NOW)
        result = await svc.rollover(_make_db())
        assert result.rows_updated == 0
        assert result.period_start == THIS_MONTH.isoformat()

    async def test_error_rolls_back(self, repo: MagicMock) -> None:
        repo.list_due_for_rollover.side_effect = RuntimeError("db down")
        db = _make_db()
        svc = TierApplicationService(repo=repo, clock=lambda: NOW)
        with pytest.raises(RuntimeError):
            await svc.rollover(db)
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
