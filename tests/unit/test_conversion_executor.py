"""Tests for ConversionExecutor over in-memory stores."""

import asyncio
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

import pytest

from src.xp_common.enums import MembershipTier
from src.xp_common.errors import (
    InsufficientBalanceError,
    RateUnavailableError,
    ValidationError,
    WalletNotFoundError,
)
from src.xp_conversion.application.service import ConversionExecutor
from src.xp_conversion.domain.models import Transaction
from src.xp_rates.domain.models import ExchangeRate
from src.xp_rates.domain.resolver import RateResolver
from src.xp_rates.domain.snapshot import RateSnapshot
from src.xp_tier.domain.models import UserStats
from src.xp_wallet.domain.constants import PLATFORM_FEE_USER_ID
from src.xp_wallet.domain.locks import WalletLockManager
from tests.unit.fakes import FakeDb, FakeStatsStore, FakeTransactionLog, FakeWalletStore

NOW = datetime(2026, 5, 10, 12, 0, tzinfo=UTC)


class FailingLog(FakeTransactionLog):
    async def append(self, db, tx: Transaction) -> Transaction:  # type: ignore[no-untyped-def]
        raise RuntimeError("log unavailable")


def _resolver() -> RateResolver:
    fresh = NOW - timedelta(hours=1)
    return RateResolver(
        snapshot=RateSnapshot(
            [
                ExchangeRate("QANTAS", "XPOINTS", Decimal("0.5"), fresh),
                ExchangeRate("XPOINTS", "GYG", Decimal("1.25"), fresh),
                ExchangeRate("GYG", "QANTAS", Decimal("3"), fresh),
            ],
            loaded_at=NOW,
        ),
        max_age_seconds=86400,
        clock=lambda: NOW,
    )


class Harness:
    def __init__(self, log: FakeTransactionLog | None = None) -> None:
        self.wallets = FakeWalletStore()
        self.stats = FakeStatsStore()
        self.log = log or FakeTransactionLog()
        self.executor = ConversionExecutor(
            wallets=self.wallets,
            stats=self.stats,
            log=self.log,
            resolver=_resolver(),
            locks=WalletLockManager(timeout_seconds=1),
            clock=lambda: NOW,
        )

    def db(self) -> FakeDb:
        return FakeDb(self.wallets, self.stats, self.log)


@pytest.fixture
def h() -> Harness:
    harness = Harness()
    harness.wallets.seed("u1", "QANTAS", 20_000)
    return harness


class TestConvert:
    async def test_over_allowance_pays_fee_on_excess(self, h: Harness) -> None:
        db = h.db()
        tx = await h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 12_000)
        assert tx.fee_applied == 10
        assert tx.amount_to == 5995
        assert tx.rate == Decimal("0.5")
        assert tx.id.startswith("cv_")
        assert h.wallets.available("u1", "QANTAS") == 8000
        assert h.wallets.available("u1", "XPOINTS") == 5995
        assert h.wallets.available(PLATFORM_FEE_USER_ID, "QANTAS") == 10
        assert db.commits == 1

    async def test_second_conversion_crosses_allowance(self, h: Harness) -> None:
        db = h.db()
        first = await h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 5000)
        second = await h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 6000)
        assert first.fee_applied == 0
        assert second.fee_applied == 5
        stats = h.stats.state["u1"]
        assert stats.monthly_points == 11_000
        assert stats.fees_paid == 5

    async def test_source_program_is_conserved(self, h: Harness) -> None:
        await h.executor.convert(h.db(), "u1", "QANTAS", "XPOINTS", 12_000)
        # debit = fee + points that left the program through the conversion
        assert h.wallets.total("QANTAS") == 20_000 - 12_000 + 10

    async def test_no_fee_means_no_house_wallet(self, h: Harness) -> None:
        await h.executor.convert(h.db(), "u1", "QANTAS", "XPOINTS", 1000)
        assert (PLATFORM_FEE_USER_ID, "QANTAS") not in h.wallets.state

    async def test_via_hub_rate(self, h: Harness) -> None:
        tx = await h.executor.convert(h.db(), "u1", "QANTAS", "GYG", 1000)
        assert tx.rate == Decimal("0.5") * Decimal("1.25")
        assert tx.amount_to == 625

    async def test_stats_updated_and_tier_upgraded(self, h: Harness) -> None:
        h.wallets.seed("u1", "QANTAS", 30_000)
        await h.executor.convert(h.db(), "u1", "QANTAS", "XPOINTS", 25_000)
        stats = h.stats.state["u1"]
        assert stats.points_converted == 25_000
        assert stats.tier == MembershipTier.SILVER

    async def test_transaction_logged(self, h: Harness) -> None:
        tx = await h.executor.convert(h.db(), "u1", "QANTAS", "XPOINTS", 2000)
        assert h.log.state == [tx]


class TestConvertRejections:
    async def test_insufficient_balance_changes_nothing(self, h: Harness) -> None:
        db = h.db()
        with pytest.raises(InsufficientBalanceError):
            await h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 25_000)
        assert h.wallets.available("u1", "QANTAS") == 20_000
        assert h.log.state == []
        assert "u1" not in h.stats.state
        assert db.rollbacks == 1

    async def test_missing_source_wallet(self, h: Harness) -> None:
        with pytest.raises(WalletNotFoundError):
            await h.executor.convert(h.db(), "u1", "GYG", "QANTAS", 100)

    async def test_same_program(self, h: Harness) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await h.executor.convert(h.db(), "u1", "QANTAS", "QANTAS", 100)
        assert exc_info.value.field == "to_program"

    async def test_non_positive_amount(self, h: Harness) -> None:
        with pytest.raises(ValidationError):
            await h.executor.convert(h.db(), "u1", "QANTAS", "XPOINTS", 0)

    async def test_amount_too_small_for_rate(self, h: Harness) -> None:
        # floor(1 * 0.5) == 0
        with pytest.raises(ValidationError):
            await h.executor.convert(h.db(), "u1", "QANTAS", "XPOINTS", 1)
        assert h.wallets.available("u1", "QANTAS") == 20_000

    async def test_no_rate(self, h: Harness) -> None:
        with pytest.raises(RateUnavailableError):
            await h.executor.convert(h.db(), "u1", "QANTAS", "DELTA", 100)

    async def test_failure_after_debit_rolls_everything_back(self) -> None:
        h = Harness(log=FailingLog())
        h.wallets.seed("u1", "QANTAS", 20_000)
        db = h.db()
        with pytest.raises(RuntimeError):
            await h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 12_000)
        assert h.wallets.available("u1", "QANTAS") == 20_000
        assert h.wallets.available("u1", "XPOINTS") == 0
        assert h.wallets.available(PLATFORM_FEE_USER_ID, "QANTAS") == 0


class TestConcurrentConversions:
    async def test_same_wallet_never_overdrawn(self, h: Harness) -> None:
        h.wallets.seed("u1", "QANTAS", 10_000)
        db = h.db()
        results = await asyncio.gather(
            h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 6000),
            h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 6000),
            return_exceptions=True,
        )
        succeeded = [r for r in results if isinstance(r, Transaction)]
        failed = [r for r in results if isinstance(r, InsufficientBalanceError)]
        assert len(succeeded) == 1
        assert len(failed) == 1
        assert h.wallets.available("u1", "QANTAS") == 4000


class TestQuote:
    async def test_quote_matches_convert_and_writes_nothing(self, h: Harness) -> None:
        db = h.db()
        quote = await h.executor.quote_conversion(db, "u1", "QANTAS", "XPOINTS", 12_000)
        assert quote.fee == 10
        assert quote.amount_to == 5995
        assert quote.rate_path == "DIRECT"
        assert quote.available_balance == 20_000
        assert quote.fee_free_remaining == 10_000
        assert db.commits == 0
        assert h.wallets.available("u1", "QANTAS") == 20_000

    async def test_quote_without_wallet(self, h: Harness) -> None:
        quote = await h.executor.quote_conversion(h.db(), "u2", "GYG", "QANTAS", 100)
        assert quote.available_balance == 0
        assert quote.amount_to == 300


class TestListTransactions:
    async def test_paginates_newest_first(self, h: Harness) -> None:
        db = h.db()
        made = [
            await h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 100 + i) for i in range(3)
        ]
        page1 = await h.executor.list_transactions(db, "u1", None, 2)
        assert [t.id for t in page1.items] == [made[2].id, made[1].id]
        assert page1.has_more is True
        page2 = await h.executor.list_transactions(db, "u1", page1.next_cursor, 2)
        assert [t.id for t in page2.items] == [made[0].id]
        assert page2.has_more is False
        assert page2.next_cursor is None

    async def test_other_users_hidden(self, h: Harness) -> None:
        db = h.db()
        await h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 100)
        page = await h.executor.list_transactions(db, "u2", None, 20)
        assert page.items == []


class RecordingStatsStore(FakeStatsStore):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    async def ensure_stats(self, db: Any, user_id: str, period_start: datetime) -> None:
        self.calls.append(f"ensure:{period_start.isoformat()}")
        await super().ensure_stats(db, user_id, period_start)

    async def get_stats(self, db: Any, user_id: str, for_update: bool = False) -> UserStats | None:
        self.calls.append("lock" if for_update else "read")
        return await super().get_stats(db, user_id, for_update)


class TestFirstConversionStatsRow:
    async def test_row_created_before_locking_read(self, h: Harness) -> None:
        stats = RecordingStatsStore()
        executor = ConversionExecutor(
            wallets=h.wallets,
            stats=stats,
            log=h.log,
            resolver=_resolver(),
            locks=WalletLockManager(timeout_seconds=1),
            clock=lambda: NOW,
        )
        await executor.convert(FakeDb(h.wallets, stats, h.log), "u1", "QANTAS", "XPOINTS", 3000)
        assert stats.calls == ["ensure:2026-05-01T00:00:00+00:00", "lock"]
        assert stats.state["u1"].monthly_points == 3000

    async def test_existing_row_is_kept(self, h: Harness) -> None:
        db = h.db()
        await h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 3000)
        await h.executor.convert(db, "u1", "QANTAS", "XPOINTS", 4000)
        assert h.stats.state["u1"].monthly_points == 7000
        assert h.stats.state["u1"].points_converted == 7000
