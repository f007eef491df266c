"""SQLAlchemy ORM model for xp_conversion. Mirrors migration 004."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.xp_common.database import Base


class ConversionTransactionORM(Base):
    __tablename__ = "conversion_transactions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    from_program: Mapped[str] = mapped_column(String(20), nullable=False)
    to_program: Mapped[str] = mapped_column(String(20), nullable=False)
    amount_from: Mapped[int] = mapped_column(BigInteger, nullable=False)
    amount_to: Mapped[int] = mapped_column(BigInteger, nullable=False)
    fee_applied: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    rate: Mapped[Decimal] = mapped_column(Numeric(30, 20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    # NOTE: no updated_at, conversion_transactions is append-only
