"""Tests for AdminService and WalletApplicationService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.xp_admin.application.service import AdminService
from src.xp_common.errors import ValidationError
from src.xp_rates.application.schemas import RefreshRatesResponse
from src.xp_tier.application.schemas import RolloverResponse
from src.xp_wallet.application.service import WalletApplicationService
from src.xp_wallet.domain.locks import WalletLockManager
from tests.unit.fakes import FakeDb, FakeWalletStore


class TestAdminService:
    async def test_sweep_reports_count(self) -> None:
        book = MagicMock()
        book.sweep_expired = AsyncMock(return_value=3)
        svc = AdminService(book=book, tiers=MagicMock(), rates=MagicMock(), wallets=MagicMock())
        assert await svc.sweep_expired_offers(MagicMock()) == {"expired": 3}

    async def test_rollover_and_refresh_delegate(self) -> None:
        tiers = MagicMock()
        tiers.rollover = AsyncMock(
            return_value=RolloverResponse(rows_updated=2, period_start="2026-05-01T00:00:00+00:00")
        )
        rates = MagicMock()
        rates.refresh = AsyncMock(
            return_value=RefreshRatesResponse(pairs_loaded=20, loaded_at="2026-05-10T12:00:00+00:00")
        )
        svc = AdminService(book=MagicMock(), tiers=tiers, rates=rates, wallets=MagicMock())
        assert (await svc.rollover_tiers(MagicMock()))["rows_updated"] == 2
        assert (await svc.refresh_rates(MagicMock()))["pairs_loaded"] == 20


class TestWalletApplicationService:
    async def test_credit_creates_wallet(self) -> None:
        store = FakeWalletStore()
        db = FakeDb(store)
        svc = WalletApplicationService(repo=store, locks=WalletLockManager(timeout_seconds=1))
        item = await svc.credit(db, "u1", "qantas", 20_000)
        assert item.program == "QANTAS"
        assert item.available_balance == 20_000
        assert item.balance_display == "20,000 pts"
        assert db.commits == 1

    async def test_credit_rejects_non_positive(self) -> None:
        svc = WalletApplicationService(repo=FakeWalletStore())
        with pytest.raises(ValidationError):
            await svc.credit(FakeDb(), "u1", "QANTAS", 0)

    async def test_list_wallets(self) -> None:
        store = FakeWalletStore()
        store.seed("u1", "QANTAS", 8000, escrowed=1000)
        store.seed("u1", "GYG", 50)
        store.seed("u2", "GYG", 70)
        svc = WalletApplicationService(repo=store)
        result = await svc.list_wallets(FakeDb(), "u1")
        assert [w.program for w in result.wallets] == ["GYG", "QANTAS"]
        assert result.wallets[1].balance == 9000

    async def test_admin_credit_includes_owner(self) -> None:
        store = FakeWalletStore()
        wallets = WalletApplicationService(repo=store, locks=WalletLockManager(timeout_seconds=1))
        svc = AdminService(book=MagicMock(), tiers=MagicMock(), rates=MagicMock(), wallets=wallets)
        result = await svc.credit_wallet(FakeDb(store), "u1", "GYG", 500)
        assert result["user_id"] == "u1"
        assert result["available_balance"] == 500
