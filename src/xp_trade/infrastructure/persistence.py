"""TradeOfferRepository — `trade_offers` and `trade_transactions`.

Status transitions are UPDATE ... WHERE status = :expected RETURNING; zero
rows back means another unit already moved the offer out of `expected`.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.enums import OfferStatus
from src.xp_common.errors import InternalError
from src.xp_trade.domain.models import TradeOffer, TradeTransaction

_OFFER_COLUMNS = """
    id, creator_id, from_program, to_program, amount_offered, amount_requested,
    custom_rate, market_rate, savings_pct, status, description,
    created_at, expires_at, updated_at
"""

_TRADE_COLUMNS = """
    id, offer_id, seller_id, buyer_id, from_program, to_program,
    amount_sold, amount_bought, rate, seller_fee, buyer_fee, completed_at
"""

_INSERT_OFFER_SQL = text(f"""
    INSERT INTO trade_offers
        (id, creator_id, from_program, to_program, amount_offered, amount_requested,
         custom_rate, market_rate, savings_pct, status, description, expires_at)
    VALUES
        (:id, :creator_id, :from_program, :to_program, :amount_offered, :amount_requested,
         :custom_rate, :market_rate, :savings_pct, :status, :description, :expires_at)
    RETURNING {_OFFER_COLUMNS}
""")

_GET_OFFER_SQL = text(f"SELECT {_OFFER_COLUMNS} FROM trade_offers WHERE id = :offer_id")

_TRANSITION_SQL = text(f"""
    UPDATE trade_offers
    SET status = :new_status
    WHERE id = :offer_id AND status = :expected
    RETURNING {_OFFER_COLUMNS}
""")

_LIST_OPEN_SQL = text(f"""
    SELECT {_OFFER_COLUMNS}
    FROM trade_offers
    WHERE status = 'ACTIVE'
      AND expires_at > :now
      AND (CAST(:exclude_user_id AS VARCHAR) IS NULL
           OR creator_id <> CAST(:exclude_user_id AS VARCHAR))
    ORDER BY created_at DESC
    LIMIT :limit
""")

_LIST_USER_OFFERS_SQL = text(f"""
    SELECT {_OFFER_COLUMNS}
    FROM trade_offers
    WHERE creator_id = :user_id
    ORDER BY created_at DESC
    LIMIT :limit
""")

_LIST_EXPIRED_ACTIVE_SQL = text(f"""
    SELECT {_OFFER_COLUMNS}
    FROM trade_offers
    WHERE status = 'ACTIVE' AND expires_at <= :now
    ORDER BY expires_at
    LIMIT :limit
""")

_INSERT_TRADE_SQL = text(f"""
    INSERT INTO trade_transactions
        (id, offer_id, seller_id, buyer_id, from_program, to_program,
         amount_sold, amount_bought, rate, seller_fee, buyer_fee, completed_at)
    VALUES
        (:id, :offer_id, :seller_id, :buyer_id, :from_program, :to_program,
         :amount_sold, :amount_bought, :rate, :seller_fee, :buyer_fee, :completed_at)
    RETURNING {_TRADE_COLUMNS}
""")

_LIST_USER_TRADES_SQL = text(f"""
    SELECT {_TRADE_COLUMNS}
    FROM trade_transactions
    WHERE seller_id = :user_id OR buyer_id = :user_id
    ORDER BY completed_at DESC
    LIMIT :limit
""")


def _opt_decimal(value: object) -> Decimal | None:
    return None if value is None else Decimal(value)  # type: ignore[arg-type]


def _row_to_offer(row: object) -> TradeOffer:
    return TradeOffer(
        id=row.id,  # type: ignore[attr-defined]
        creator_id=row.creator_id,  # type: ignore[attr-defined]
        from_program=row.from_program,  # type: ignore[attr-defined]
        to_program=row.to_program,  # type: ignore[attr-defined]
        amount_offered=row.amount_offered,  # type: ignore[attr-defined]
        amount_requested=row.amount_requested,  # type: ignore[attr-defined]
        custom_rate=Decimal(row.custom_rate),  # type: ignore[attr-defined]
        market_rate=_opt_decimal(row.market_rate),  # type: ignore[attr-defined]
        savings_pct=_opt_decimal(row.savings_pct),  # type: ignore[attr-defined]
        status=OfferStatus(row.status),  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        expires_at=row.expires_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_trade(row: object) -> TradeTransaction:
    return TradeTransaction(
        id=row.id,  # type: ignore[attr-defined]
        offer_id=row.offer_id,  # type: ignore[attr-defined]
        seller_id=row.seller_id,  # type: ignore[attr-defined]
        buyer_id=row.buyer_id,  # type: ignore[attr-defined]
        from_program=row.from_program,  # type: ignore[attr-defined]
        to_program=row.to_program,  # type: ignore[attr-defined]
        amount_sold=row.amount_sold,  # type: ignore[attr-defined]
        amount_bought=row.amount_bought,  # type: ignore[attr-defined]
        rate=Decimal(row.rate),  # type: ignore[attr-defined]
        seller_fee=row.seller_fee,  # type: ignore[attr-defined]
        buyer_fee=row.buyer_fee,  # type: ignore[attr-defined]
        completed_at=row.completed_at,  # type: ignore[attr-defined]
    )


class TradeOfferRepository:
    async def insert_offer(self, db: AsyncSession, offer: TradeOffer) -> TradeOffer:
        result = await db.execute(
            _INSERT_OFFER_SQL,
            {
                "id": offer.id,
                "creator_id": offer.creator_id,
                "from_program": offer.from_program,
                "to_program": offer.to_program,
                "amount_offered": offer.amount_offered,
                "amount_requested": offer.amount_requested,
                "custom_rate": offer.custom_rate,
                "market_rate": offer.market_rate,
                "savings_pct": offer.savings_pct,
                "status": OfferStatus(offer.status).value,
                "description": offer.description,
                "expires_at": offer.expires_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Trade offer insert returned no rows")
        return _row_to_offer(row)

    async def get_offer(self, db: AsyncSession, offer_id: str) -> TradeOffer | None:
        row = (await db.execute(_GET_OFFER_SQL, {"offer_id": offer_id})).fetchone()
        return _row_to_offer(row) if row else None

    async def transition_status(
        self,
        db: AsyncSession,
        offer_id: str,
        expected: OfferStatus,
        new_status: OfferStatus,
    ) -> TradeOffer | None:
        result = await db.execute(
            _TRANSITION_SQL,
            {
                "offer_id": offer_id,
                "expected": OfferStatus(expected).value,
                "new_status": OfferStatus(new_status).value,
            },
        )
        row = result.fetchone()
        return _row_to_offer(row) if row else None

    async def list_open_offers(
        self, db: AsyncSession, exclude_user_id: str | None, now: datetime, limit: int
    ) -> list[TradeOffer]:
        result = await db.execute(
            _LIST_OPEN_SQL, {"exclude_user_id": exclude_user_id, "now": now, "limit": limit}
        )
        return [_row_to_offer(row) for row in result.fetchall()]

    async def list_user_offers(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[TradeOffer]:
        result = await db.execute(_LIST_USER_OFFERS_SQL, {"user_id": user_id, "limit": limit})
        return [_row_to_offer(row) for row in result.fetchall()]

    async def list_expired_active(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[TradeOffer]:
        result = await db.execute(_LIST_EXPIRED_ACTIVE_SQL, {"now": now, "limit": limit})
        return [_row_to_offer(row) for row in result.fetchall()]

    async def insert_trade(
        self, db: AsyncSession, trade: TradeTransaction
    ) -> TradeTransaction:
        result = await db.execute(
            _INSERT_TRADE_SQL,
            {
                "id": trade.id,
                "offer_id": trade.offer_id,
                "seller_id": trade.seller_id,
                "buyer_id": trade.buyer_id,
                "from_program": trade.from_program,
                "to_program": trade.to_program,
                "amount_sold": trade.amount_sold,
                "amount_bought": trade.amount_bought,
                "rate": trade.rate,
                "seller_fee": trade.seller_fee,
                "buyer_fee": trade.buyer_fee,
                "completed_at": trade.completed_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Trade insert returned no rows")
        return _row_to_trade(row)

    async def list_user_trades(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[TradeTransaction]:
        result = await db.execute(_LIST_USER_TRADES_SQL, {"user_id": user_id, "limit": limit})
        return [_row_to_trade(row) for row in result.fetchall()]
