"""SQLAlchemy ORM model for xp_tier. Mirrors migration 005."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.xp_common.database import Base


class UserStatsORM(Base):
    __tablename__ = "user_stats"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    monthly_points: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    points_converted: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    fees_paid: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tier: Mapped[str] = mapped_column(String(20), nullable=False, default="STANDARD")
    period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    tier_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
