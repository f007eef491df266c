"""Tests for xp_rates: RateSnapshot and RateResolver."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.xp_common.enums import RatePath
from src.xp_common.errors import InternalError, RateUnavailableError
from src.xp_rates.domain.models import ExchangeRate
from src.xp_rates.domain.resolver import RateResolver
from src.xp_rates.domain.snapshot import RateSnapshot
from tests.unit.fakes import FakeRateFeed

NOW = datetime(2026, 5, 10, 12, 0, tzinfo=UTC)
FRESH = NOW - timedelta(hours=1)
STALE = NOW - timedelta(days=2)


def _resolver(*rates: ExchangeRate) -> RateResolver:
    return RateResolver(
        snapshot=RateSnapshot(rates, loaded_at=NOW),
        max_age_seconds=86400,
        clock=lambda: NOW,
    )


class TestExchangeRate:
    def test_coerces_to_decimal(self) -> None:
        rate = ExchangeRate("QANTAS", "XPOINTS", 0.6, FRESH)  # type: ignore[arg-type]
        assert rate.rate == Decimal("0.6")

    def test_non_positive_rejected(self) -> None:
        with pytest.raises(ValueError):
            ExchangeRate("QANTAS", "XPOINTS", Decimal(0), FRESH)

    def test_pair(self) -> None:
        assert ExchangeRate("QANTAS", "GYG", Decimal("0.75"), FRESH).pair == "QANTAS/GYG"


class TestRateSnapshot:
    def test_keeps_newest_per_pair(self) -> None:
        older = ExchangeRate("QANTAS", "XPOINTS", Decimal("0.5"), STALE)
        newer = ExchangeRate("QANTAS", "XPOINTS", Decimal("0.6"), FRESH)
        snap = RateSnapshot([newer, older])
        assert len(snap) == 1
        assert snap.get("QANTAS", "XPOINTS") is newer

    def test_missing_pair(self) -> None:
        assert RateSnapshot([]).get("QANTAS", "GYG") is None


class TestQuote:
    def test_identity(self) -> None:
        quote = _resolver().quote("GYG", "GYG")
        assert quote.rate == Decimal(1)
        assert quote.path == RatePath.IDENTITY

    def test_direct(self) -> None:
        resolver = _resolver(ExchangeRate("QANTAS", "GYG", Decimal("0.75"), FRESH))
        quote = resolver.quote("QANTAS", "GYG")
        assert quote.rate == Decimal("0.75")
        assert quote.path == RatePath.DIRECT

    def test_direct_is_not_inverted(self) -> None:
        resolver = _resolver(ExchangeRate("QANTAS", "GYG", Decimal("0.75"), FRESH))
        with pytest.raises(RateUnavailableError):
            resolver.quote("GYG", "QANTAS")

    def test_via_hub_is_product(self) -> None:
        resolver = _resolver(
            ExchangeRate("QANTAS", "XPOINTS", Decimal("0.6"), FRESH),
            ExchangeRate("XPOINTS", "DELTA", Decimal("1.5"), NOW - timedelta(hours=3)),
        )
        quote = resolver.quote("QANTAS", "DELTA")
        assert quote.rate == Decimal("0.6") * Decimal("1.5")
        assert quote.path == RatePath.VIA_HUB
        assert quote.as_of == NOW - timedelta(hours=3)

    def test_direct_preferred_over_hub(self) -> None:
        resolver = _resolver(
            ExchangeRate("QANTAS", "GYG", Decimal("0.75"), FRESH),
            ExchangeRate("QANTAS", "XPOINTS", Decimal("0.6"), FRESH),
            ExchangeRate("XPOINTS", "GYG", Decimal("1.25"), FRESH),
        )
        assert resolver.resolve("QANTAS", "GYG") == Decimal("0.75")

    def test_hub_side_is_not_composed(self) -> None:
        resolver = _resolver(ExchangeRate("XPOINTS", "GYG", Decimal("1.25"), FRESH))
        with pytest.raises(RateUnavailableError) as exc_info:
            resolver.quote("QANTAS", "XPOINTS")
        assert exc_info.value.reason == "no rate"

    def test_no_rate(self) -> None:
        with pytest.raises(RateUnavailableError) as exc_info:
            _resolver().quote("QANTAS", "GYG")
        assert exc_info.value.reason == "no rate"

    def test_stale_direct_is_unusable(self) -> None:
        resolver = _resolver(ExchangeRate("QANTAS", "GYG", Decimal("0.75"), STALE))
        with pytest.raises(RateUnavailableError) as exc_info:
            resolver.quote("QANTAS", "GYG")
        assert exc_info.value.reason == "rate is stale"

    def test_stale_direct_falls_back_to_fresh_hub(self) -> None:
        resolver = _resolver(
            ExchangeRate("QANTAS", "GYG", Decimal("0.75"), STALE),
            ExchangeRate("QANTAS", "XPOINTS", Decimal("0.6"), FRESH),
            ExchangeRate("XPOINTS", "GYG", Decimal("1.25"), FRESH),
        )
        assert resolver.quote("QANTAS", "GYG").path == RatePath.VIA_HUB

    def test_stale_hub_leg(self) -> None:
        resolver = _resolver(
            ExchangeRate("QANTAS", "XPOINTS", Decimal("0.6"), FRESH),
            ExchangeRate("XPOINTS", "GYG", Decimal("1.25"), STALE),
        )
        with pytest.raises(RateUnavailableError) as exc_info:
            resolver.quote("QANTAS", "GYG")
        assert exc_info.value.reason == "rate is stale"

    def test_try_resolve_returns_none(self) -> None:
        assert _resolver().try_resolve("QANTAS", "GYG") is None


class TestRefresh:
    async def test_refresh_swaps_snapshot(self) -> None:
        feed = FakeRateFeed([ExchangeRate("QANTAS", "XPOINTS", Decimal("0.6"), FRESH)])
        resolver = RateResolver(feed=feed, clock=lambda: NOW)
        snapshot = await resolver.refresh(MagicMock())
        assert len(snapshot) == 1
        assert snapshot.loaded_at == NOW
        assert resolver.snapshot is snapshot

    async def test_old_snapshot_untouched_by_refresh(self) -> None:
        feed = FakeRateFeed([ExchangeRate("QANTAS", "XPOINTS", Decimal("0.6"), FRESH)])
        resolver = RateResolver(feed=feed, clock=lambda: NOW)
        before = resolver.snapshot
        await resolver.refresh(MagicMock())
        assert len(before) == 0

    async def test_ensure_loaded_only_once(self) -> None:
        feed = FakeRateFeed([ExchangeRate("QANTAS", "XPOINTS", Decimal("0.6"), FRESH)])
        resolver = RateResolver(feed=feed, clock=lambda: NOW)
        await resolver.ensure_loaded(MagicMock())
        await resolver.ensure_loaded(MagicMock())
        assert feed.loads == 1

    async def test_refresh_without_feed(self) -> None:
        with pytest.raises(InternalError):
            await RateResolver().refresh(MagicMock())
