"""Domain models for xp_tier — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.xp_common.enums import MembershipTier


@dataclass
class UserStats:
    user_id: str
    monthly_points: int = 0        # converted in the month starting at period_start
    points_converted: int = 0      # lifetime
    fees_paid: int = 0             # lifetime, points
    tier: MembershipTier = MembershipTier.STANDARD
    period_start: datetime | None = None
    tier_expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
