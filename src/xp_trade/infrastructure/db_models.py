"""SQLAlchemy ORM models for xp_trade. Mirror migrations 006 and 007."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, Computed, DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.xp_common.database import Base


class TradeOfferORM(Base):
    __tablename__ = "trade_offers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    creator_id: Mapped[str] = mapped_column(String(64), nullable=False)
    from_program: Mapped[str] = mapped_column(String(20), nullable=False)
    to_program: Mapped[str] = mapped_column(String(20), nullable=False)
    amount_offered: Mapped[int] = mapped_column(BigInteger, nullable=False)
    amount_requested: Mapped[int] = mapped_column(BigInteger, nullable=False)
    custom_rate: Mapped[Decimal] = mapped_column(Numeric(30, 10), nullable=False)
    market_rate: Mapped[Decimal | None] = mapped_column(Numeric(30, 20), nullable=True)
    savings_pct: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class TradeTransactionORM(Base):
    __tablename__ = "trade_transactions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    offer_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False)
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    from_program: Mapped[str] = mapped_column(String(20), nullable=False)
    to_program: Mapped[str] = mapped_column(String(20), nullable=False)
    amount_sold: Mapped[int] = mapped_column(BigInteger, nullable=False)
    amount_bought: Mapped[int] = mapped_column(BigInteger, nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(30, 10), nullable=False)
    seller_fee: Mapped[int] = mapped_column(BigInteger, nullable=False)
    buyer_fee: Mapped[int] = mapped_column(BigInteger, nullable=False)
    facilitation_fee: Mapped[int] = mapped_column(
        BigInteger, Computed("seller_fee + buyer_fee", persisted=True)
    )
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
