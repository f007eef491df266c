"""ConversionExecutor — atomic wallet-to-wallet conversion.

One conversion is one database transaction, run while holding the
in-process locks on both wallets and the user's stats:

    debit source         (guarded: available >= amount)
    credit destination   (wallet created on demand)
    credit fee           (house wallet, source program)
    append Transaction
    update UserStats     (monthly volume, lifetime totals, tier)

Any error rolls the whole unit back. Lock contention surfaces as
ConcurrencyConflictError and the unit is retried a bounded number of times.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.xp_common.database import set_lock_timeout, translate_db_errors
from src.xp_common.datetime_utils import month_start, utc_now
from src.xp_common.enums import LoyaltyProgram, TransactionStatus, parse_program
from src.xp_common.errors import ValidationError
from src.xp_common.id_generator import generate_id
from src.xp_common.pagination import cursor_decode, cursor_encode
from src.xp_common.points import validate_amount
from src.xp_common.retry import retry_on_conflict
from src.xp_conversion.application.schemas import (
    ConversionQuoteResponse,
    TransactionListResponse,
    TransactionResponse,
)
from src.xp_conversion.domain.models import Transaction
from src.xp_conversion.domain.pricing import price_conversion
from src.xp_conversion.domain.repository import TransactionLogProtocol
from src.xp_conversion.infrastructure.persistence import TransactionLogRepository
from src.xp_rates.application.service import rate_resolver
from src.xp_rates.domain.resolver import RateResolver
from src.xp_tier.domain.fee_calculator import allowance_remaining
from src.xp_tier.domain.models import UserStats
from src.xp_tier.domain.repository import UserStatsStoreProtocol
from src.xp_tier.domain.tier_engine import apply_conversion, recompute
from src.xp_tier.infrastructure.persistence import UserStatsRepository
from src.xp_wallet.domain.constants import PLATFORM_FEE_USER_ID
from src.xp_wallet.domain.locks import (
    WalletLockManager,
    user_stats_key,
    wallet_key,
    wallet_locks,
)
from src.xp_wallet.domain.repository import WalletStoreProtocol
from src.xp_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class ConversionExecutor:
    def __init__(
        self,
        wallets: WalletStoreProtocol | None = None,
        stats: UserStatsStoreProtocol | None = None,
        log: TransactionLogProtocol | None = None,
        resolver: RateResolver | None = None,
        locks: WalletLockManager | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._wallets: WalletStoreProtocol = wallets or WalletRepository()
        self._stats: UserStatsStoreProtocol = stats or UserStatsRepository()
        self._log: TransactionLogProtocol = log or TransactionLogRepository()
        self._resolver = resolver or rate_resolver
        self._locks = locks or wallet_locks
        self._clock = clock

    async def convert(
        self,
        db: AsyncSession,
        user_id: str,
        from_program: str | LoyaltyProgram,
        to_program: str | LoyaltyProgram,
        amount: int,
    ) -> Transaction:
        source, dest = _validate_pair(from_program, to_program)
        validate_amount(amount)
        await self._resolver.ensure_loaded(db)
        rate = self._resolver.resolve(source, dest)

        async def _unit() -> Transaction:
            async with self._locks.hold(
                wallet_key(user_id, source),
                wallet_key(user_id, dest),
                user_stats_key(user_id),
            ):
                try:
                    async with translate_db_errors():
                        tx = await self._convert_inner(db, user_id, source, dest, amount, rate)
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise
            return tx

        tx = await retry_on_conflict(_unit, name="conversion")
        logger.info(
            "Conversion %s: %d %s -> %d %s (fee %d, rate %s)",
            tx.id, tx.amount_from, source, tx.amount_to, dest, tx.fee_applied, tx.rate,
        )
        return tx

    async def _convert_inner(
        self,
        db: AsyncSession,
        user_id: str,
        source: str,
        dest: str,
        amount: int,
        rate: Decimal,
    ) -> Transaction:
        now = self._clock()
        await set_lock_timeout(db, settings.DB_LOCK_TIMEOUT_MS)

        # first conversion: create the row so the lock below serialises other workers
        await self._stats.ensure_stats(db, user_id, month_start(now))
        stored = await self._stats.get_stats(db, user_id, for_update=True)
        stats = recompute(stored or UserStats(user_id=user_id), now)
        pricing = price_conversion(amount, rate, stats.tier, stats.monthly_points)

        await self._wallets.debit(db, user_id, source, amount)
        await self._wallets.credit(db, user_id, dest, pricing.amount_to)
        if pricing.fee > 0:
            await self._wallets.credit(db, PLATFORM_FEE_USER_ID, source, pricing.fee)

        tx = await self._log.append(
            db,
            Transaction(
                id=generate_id("cv_"),
                user_id=user_id,
                from_program=source,
                to_program=dest,
                amount_from=amount,
                amount_to=pricing.amount_to,
                fee_applied=pricing.fee,
                rate=rate,
                status=TransactionStatus.COMPLETED,
                created_at=now,
            ),
        )
        await self._stats.save_stats(db, apply_conversion(stats, amount, pricing.fee, now))
        return tx

    async def quote_conversion(
        self,
        db: AsyncSession,
        user_id: str,
        from_program: str | LoyaltyProgram,
        to_program: str | LoyaltyProgram,
        amount: int,
    ) -> ConversionQuoteResponse:
        """Same numbers convert() would produce right now; writes nothing."""
        source, dest = _validate_pair(from_program, to_program)
        validate_amount(amount)
        await self._resolver.ensure_loaded(db)
        quote = self._resolver.quote(source, dest)

        stored = await self._stats.get_stats(db, user_id)
        stats = recompute(stored or UserStats(user_id=user_id), self._clock())
        pricing = price_conversion(amount, quote.rate, stats.tier, stats.monthly_points)
        wallet = await self._wallets.get_wallet(db, user_id, source)
        return ConversionQuoteResponse(
            from_program=source,
            to_program=dest,
            amount_from=amount,
            amount_to=pricing.amount_to,
            fee=pricing.fee,
            rate=str(quote.rate),
            rate_path=quote.path.value,
            tier=stats.tier.value,
            monthly_points_before=stats.monthly_points,
            fee_free_remaining=allowance_remaining(stats.tier, stats.monthly_points),
            available_balance=wallet.available_balance if wallet else 0,
        )

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
    ) -> TransactionListResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        rows = await self._log.list_for_user(db, user_id, cursor_id, limit + 1)
        has_more = len(rows) > limit
        page = rows[:limit]
        return TransactionListResponse(
            items=[TransactionResponse.from_domain(tx) for tx in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )


def _validate_pair(
    from_program: str | LoyaltyProgram, to_program: str | LoyaltyProgram
) -> tuple[str, str]:
    source = parse_program(from_program, "from_program").value
    dest = parse_program(to_program, "to_program").value
    if source == dest:
        raise ValidationError("to_program", "must differ from from_program")
    return source, dest
