"""Domain models for xp_wallet — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Wallet:
    user_id: str
    program: str                  # LoyaltyProgram value
    available_balance: int        # points
    escrowed_balance: int         # points held by ACTIVE trade offers
    version: int
    id: int | None = None         # BIGSERIAL
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def balance(self) -> int:
        return self.available_balance + self.escrowed_balance
