"""TradeOfferBook — peer-to-peer offers at a custom rate.

    ACTIVE ──accept──▶ COMPLETED
       │──cancel──▶ CANCELLED
       └──sweep───▶ EXPIRED

Every exit from ACTIVE is a status compare-and-set inside the same database
transaction as the balance moves it implies, so an offer leaves ACTIVE
exactly once and its escrow is released or consumed exactly once.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.xp_common.database import set_lock_timeout, translate_db_errors
from src.xp_common.datetime_utils import ensure_utc, utc_now
from src.xp_common.enums import LoyaltyProgram, OfferStatus, parse_program
from src.xp_common.errors import (
    AuthorizationError,
    ConcurrencyConflictError,
    ExpiredOfferError,
    OfferNotActiveError,
    OfferNotFoundError,
    SelfTradeError,
    ValidationError,
)
from src.xp_common.id_generator import generate_id
from src.xp_common.points import fee_from_rate, validate_amount
from src.xp_common.retry import retry_on_conflict
from src.xp_rates.application.service import rate_resolver
from src.xp_rates.domain.resolver import RateResolver
from src.xp_tier.domain.models import UserStats
from src.xp_tier.domain.repository import UserStatsStoreProtocol
from src.xp_tier.domain.tier_engine import recompute
from src.xp_tier.infrastructure.persistence import UserStatsRepository
from src.xp_trade.domain.facilitation_fee import (
    TradeFees,
    custom_rate,
    facilitation_fee_rate,
    max_fee_rate,
    savings_pct,
    trade_fees,
)
from src.xp_trade.domain.models import TradeOffer, TradeTransaction
from src.xp_trade.domain.repository import TradeOfferStoreProtocol
from src.xp_trade.infrastructure.persistence import TradeOfferRepository
from src.xp_wallet.domain.constants import PLATFORM_FEE_USER_ID
from src.xp_wallet.domain.locks import WalletLockManager, offer_key, wallet_key, wallet_locks
from src.xp_wallet.domain.repository import WalletStoreProtocol
from src.xp_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)

_SWEEP_BATCH = 500


class TradeOfferBook:
    def __init__(
        self,
        wallets: WalletStoreProtocol | None = None,
        offers: TradeOfferStoreProtocol | None = None,
        stats: UserStatsStoreProtocol | None = None,
        resolver: RateResolver | None = None,
        locks: WalletLockManager | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._wallets: WalletStoreProtocol = wallets or WalletRepository()
        self._offers: TradeOfferStoreProtocol = offers or TradeOfferRepository()
        self._stats: UserStatsStoreProtocol = stats or UserStatsRepository()
        self._resolver = resolver or rate_resolver
        self._locks = locks or wallet_locks
        self._clock = clock

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    async def create(
        self,
        db: AsyncSession,
        creator_id: str,
        from_program: str | LoyaltyProgram,
        to_program: str | LoyaltyProgram,
        amount_offered: int,
        amount_requested: int,
        expires_at: datetime,
        description: str | None = None,
    ) -> TradeOffer:
        source = parse_program(from_program, "from_program").value
        dest = parse_program(to_program, "to_program").value
        if source == dest:
            raise ValidationError("to_program", "must differ from from_program")
        validate_amount(amount_offered, "amount_offered")
        validate_amount(amount_requested, "amount_requested")
        _check_covers_fee(amount_offered, "amount_offered")
        _check_covers_fee(amount_requested, "amount_requested")

        now = self._clock()
        expires_at = ensure_utc(expires_at)
        if expires_at <= now:
            raise ValidationError("expires_at", "must be in the future")
        if expires_at > now + timedelta(days=settings.TRADE_OFFER_MAX_DAYS):
            raise ValidationError(
                "expires_at", f"must be within {settings.TRADE_OFFER_MAX_DAYS} days"
            )

        await self._resolver.ensure_loaded(db)
        market = self._resolver.try_resolve(source, dest)
        rate = custom_rate(amount_offered, amount_requested)

        async def _unit() -> TradeOffer:
            async with self._locks.hold(wallet_key(creator_id, source)):
                try:
                    async with translate_db_errors():
                        await set_lock_timeout(db, settings.DB_LOCK_TIMEOUT_MS)
                        await self._wallets.escrow(db, creator_id, source, amount_offered)
                        offer = await self._offers.insert_offer(
                            db,
                            TradeOffer(
                                id=generate_id("to_"),
                                creator_id=creator_id,
                                from_program=source,
                                to_program=dest,
                                amount_offered=amount_offered,
                                amount_requested=amount_requested,
                                custom_rate=rate,
                                market_rate=market,
                                savings_pct=savings_pct(market, rate),
                                expires_at=expires_at,
                                description=description,
                                created_at=now,
                            ),
                        )
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise
            return offer

        offer = await retry_on_conflict(_unit, name="trade_offer.create")
        logger.info(
            "Trade offer %s created: %d %s for %d %s",
            offer.id, amount_offered, source, amount_requested, dest,
        )
        return offer

    # ------------------------------------------------------------------
    # accept
    # ------------------------------------------------------------------

    async def accept(
        self, db: AsyncSession, offer_id: str, acceptor_id: str
    ) -> TradeTransaction:
        offer = await self._offers.get_offer(db, offer_id)
        if offer is None:
            raise OfferNotFoundError(offer_id)
        if offer.creator_id == acceptor_id:
            raise SelfTradeError()
        await self._resolver.ensure_loaded(db)

        async def _unit() -> TradeTransaction:
            async with self._locks.hold(
                offer_key(offer.id),
                wallet_key(offer.creator_id, offer.from_program),
                wallet_key(offer.creator_id, offer.to_program),
                wallet_key(acceptor_id, offer.from_program),
                wallet_key(acceptor_id, offer.to_program),
            ):
                try:
                    async with translate_db_errors():
                        trade = await self._accept_inner(db, offer.id, acceptor_id)
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise
            return trade

        trade = await retry_on_conflict(_unit, name="trade_offer.accept")
        logger.info(
            "Trade offer %s completed as %s (fees %d + %d)",
            offer_id, trade.id, trade.seller_fee, trade.buyer_fee,
        )
        return trade

    async def _accept_inner(
        self, db: AsyncSession, offer_id: str, acceptor_id: str
    ) -> TradeTransaction:
        now = self._clock()
        await set_lock_timeout(db, settings.DB_LOCK_TIMEOUT_MS)

        offer = await self._offers.get_offer(db, offer_id)
        if offer is None:
            raise OfferNotFoundError(offer_id)
        if offer.status != OfferStatus.ACTIVE:
            raise OfferNotActiveError(offer_id)
        if offer.is_expired(now):
            raise ExpiredOfferError(offer_id)

        fees = await self._fees_for(db, offer, acceptor_id, now)

        # a concurrent accept/cancel/sweep that got here first leaves zero rows
        if await self._offers.transition_status(
            db, offer_id, OfferStatus.ACTIVE, OfferStatus.COMPLETED
        ) is None:
            raise OfferNotActiveError(offer_id)

        seller, buyer = offer.creator_id, acceptor_id
        await self._wallets.debit(db, buyer, offer.to_program, offer.amount_requested)
        await self._wallets.consume_escrow(db, seller, offer.from_program, offer.amount_offered)
        await self._wallets.credit(
            db, buyer, offer.from_program, offer.amount_offered - fees.seller_fee
        )
        await self._wallets.credit(
            db, seller, offer.to_program, offer.amount_requested - fees.buyer_fee
        )
        # house wallets in a fixed order so concurrent trades lock them alike
        house_credits = sorted(
            [(offer.from_program, fees.seller_fee), (offer.to_program, fees.buyer_fee)]
        )
        for program, fee in house_credits:
            if fee > 0:
                await self._wallets.credit(db, PLATFORM_FEE_USER_ID, program, fee)

        return await self._offers.insert_trade(
            db,
            TradeTransaction(
                id=generate_id("tt_"),
                offer_id=offer.id,
                seller_id=seller,
                buyer_id=buyer,
                from_program=offer.from_program,
                to_program=offer.to_program,
                amount_sold=offer.amount_offered,
                amount_bought=offer.amount_requested,
                rate=offer.custom_rate,
                seller_fee=fees.seller_fee,
                buyer_fee=fees.buyer_fee,
                completed_at=now,
            ),
        )

    async def _fees_for(
        self, db: AsyncSession, offer: TradeOffer, acceptor_id: str, now: datetime
    ) -> TradeFees:
        stored = await self._stats.get_stats(db, acceptor_id)
        tier = recompute(stored or UserStats(user_id=acceptor_id), now).tier
        market = self._resolver.try_resolve(offer.from_program, offer.to_program)
        if market is None:
            market = offer.market_rate
        rate = facilitation_fee_rate(
            savings_pct(market, offer.custom_rate), tier, settings.TRADE_FEE_SAVINGS_SHARE_PCT
        )
        return trade_fees(offer.amount_offered, offer.amount_requested, rate)

    # ------------------------------------------------------------------
    # cancel / expire
    # ------------------------------------------------------------------

    async def cancel(self, db: AsyncSession, offer_id: str, caller_id: str) -> TradeOffer:
        offer = await self._offers.get_offer(db, offer_id)
        if offer is None:
            raise OfferNotFoundError(offer_id)
        if offer.creator_id != caller_id:
            raise AuthorizationError("Only the offer creator can cancel it")

        async def _unit() -> TradeOffer:
            return await self._release(db, offer, OfferStatus.CANCELLED)

        cancelled = await retry_on_conflict(_unit, name="trade_offer.cancel")
        if cancelled is None:
            raise OfferNotActiveError(offer_id)
        logger.info("Trade offer %s cancelled", offer_id)
        return cancelled

    async def sweep_expired(
        self,
        db: AsyncSession,
        now: datetime | None = None,
        batch_size: int = _SWEEP_BATCH,
    ) -> int:
        """Expire every ACTIVE offer past its expiry and release its escrow.

        Due offers are read in batches until none are left. An offer whose
        locks are busy is skipped for the rest of this sweep; the fetch limit
        grows by the number skipped so they never crowd out the remaining
        due offers. Idempotent: an offer already moved out of ACTIVE is left
        alone by the status compare-and-set.
        """
        now = now or self._clock()
        skipped: set[str] = set()
        expired = 0
        while True:
            batch = await self._offers.list_expired_active(db, now, batch_size + len(skipped))
            due = [offer for offer in batch if offer.id not in skipped]
            if not due:
                break
            for offer in due:
                try:
                    if await self._release(db, offer, OfferStatus.EXPIRED) is not None:
                        expired += 1
                except ConcurrencyConflictError:
                    logger.warning("Offer %s busy, leaving it for the next sweep", offer.id)
                    skipped.add(offer.id)
        logger.info("Expiry sweep: %d offers expired, %d busy", expired, len(skipped))
        return expired

    async def _release(
        self, db: AsyncSession, offer: TradeOffer, new_status: OfferStatus
    ) -> TradeOffer | None:
        """ACTIVE -> new_status and escrow back to available, as one unit.
        None when the offer had already left ACTIVE."""
        async with self._locks.hold(
            offer_key(offer.id), wallet_key(offer.creator_id, offer.from_program)
        ):
            try:
                async with translate_db_errors():
                    await set_lock_timeout(db, settings.DB_LOCK_TIMEOUT_MS)
                    moved = await self._offers.transition_status(
                        db, offer.id, OfferStatus.ACTIVE, new_status
                    )
                    if moved is not None:
                        await self._wallets.release_escrow(
                            db, moved.creator_id, moved.from_program, moved.amount_offered
                        )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        return moved

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    async def get_offer(self, db: AsyncSession, offer_id: str) -> TradeOffer:
        offer = await self._offers.get_offer(db, offer_id)
        if offer is None:
            raise OfferNotFoundError(offer_id)
        return offer

    async def list_open_offers(
        self, db: AsyncSession, exclude_user_id: str | None = None, limit: int = 50
    ) -> list[TradeOffer]:
        return await self._offers.list_open_offers(db, exclude_user_id, self._clock(), limit)

    async def list_user_offers(
        self, db: AsyncSession, user_id: str, limit: int = 50
    ) -> list[TradeOffer]:
        return await self._offers.list_user_offers(db, user_id, limit)

    async def list_trade_history(
        self, db: AsyncSession, user_id: str, limit: int = 50
    ) -> list[TradeTransaction]:
        return await self._offers.list_user_trades(db, user_id, limit)


def _check_covers_fee(amount: int, field: str) -> None:
    # the counterparty must receive something even at the highest fee rate
    if fee_from_rate(amount, max_fee_rate()) >= amount:
        raise ValidationError(field, f"{amount} points is too small to trade")
