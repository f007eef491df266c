"""RateResolver — exchange rate between any two programs.

Lookup order:
  1. from == to                 -> 1 (IDENTITY)
  2. direct pair                -> rate(from, to) (DIRECT)
  3. via the universal currency -> rate(from, HUB) * rate(HUB, to) (VIA_HUB)

Rates older than max_age_seconds are never used. When the only path that
exists is stale, the error says so, so callers can tell "feed is behind"
apart from "pair not supported".

Reads never lock: they work on whichever snapshot was current when they
started.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.xp_common.datetime_utils import ensure_utc, utc_now
from src.xp_common.enums import HUB_PROGRAM, RatePath
from src.xp_common.errors import InternalError, RateUnavailableError
from src.xp_rates.domain.models import ExchangeRate, RateQuote
from src.xp_rates.domain.repository import RateFeedProtocol
from src.xp_rates.domain.snapshot import EMPTY_SNAPSHOT, RateSnapshot

logger = logging.getLogger(__name__)

_ONE = Decimal(1)


class RateResolver:
    def __init__(
        self,
        feed: RateFeedProtocol | None = None,
        snapshot: RateSnapshot | None = None,
        max_age_seconds: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._feed = feed
        self._snapshot = snapshot if snapshot is not None else EMPTY_SNAPSHOT
        self._max_age = timedelta(
            seconds=max_age_seconds if max_age_seconds is not None else settings.RATE_MAX_AGE_SECONDS
        )
        self._clock = clock

    @property
    def snapshot(self) -> RateSnapshot:
        return self._snapshot

    def replace_snapshot(self, snapshot: RateSnapshot) -> None:
        self._snapshot = snapshot

    async def refresh(self, db: AsyncSession) -> RateSnapshot:
        """Reload every pair from the feed and swap the snapshot wholesale."""
        if self._feed is None:
            raise InternalError("No rate feed configured")
        rates = await self._feed.load_latest_rates(db)
        snapshot = RateSnapshot(rates, loaded_at=self._clock())
        self._snapshot = snapshot
        logger.info("Loaded %d exchange rate pairs", len(snapshot))
        return snapshot

    async def ensure_loaded(self, db: AsyncSession) -> None:
        if self._snapshot.loaded_at is None and len(self._snapshot) == 0:
            await self.refresh(db)

    def resolve(self, from_program: str, to_program: str) -> Decimal:
        return self.quote(from_program, to_program).rate

    def quote(self, from_program: str, to_program: str) -> RateQuote:
        if from_program == to_program:
            return RateQuote(from_program, to_program, _ONE, RatePath.IDENTITY, None)

        snapshot = self._snapshot  # one consistent view for the whole lookup
        now = self._clock()
        saw_stale = False

        direct = snapshot.get(from_program, to_program)
        if direct is not None:
            if self._is_fresh(direct, now):
                return RateQuote(
                    from_program, to_program, direct.rate, RatePath.DIRECT, direct.as_of
                )
            saw_stale = True

        hub = HUB_PROGRAM.value
        if from_program != hub and to_program != hub:
            first = snapshot.get(from_program, hub)
            second = snapshot.get(hub, to_program)
            if first is not None and second is not None:
                if self._is_fresh(first, now) and self._is_fresh(second, now):
                    return RateQuote(
                        from_program,
                        to_program,
                        first.rate * second.rate,
                        RatePath.VIA_HUB,
                        min(first.as_of, second.as_of),
                    )
                saw_stale = True

        raise RateUnavailableError(
            from_program, to_program, "rate is stale" if saw_stale else "no rate"
        )

    def try_resolve(self, from_program: str, to_program: str) -> Decimal | None:
        """resolve() that answers None instead of raising."""
        try:
            return self.resolve(from_program, to_program)
        except RateUnavailableError:
            return None

    def _is_fresh(self, rate: ExchangeRate, now: datetime) -> bool:
        return ensure_utc(now) - ensure_utc(rate.as_of) <= self._max_age

