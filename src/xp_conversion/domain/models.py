"""Domain models for xp_conversion — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.xp_common.enums import TransactionStatus


@dataclass
class Transaction:
    """One completed wallet-to-wallet conversion. Append-only."""

    id: str
    user_id: str
    from_program: str
    to_program: str
    amount_from: int          # debited from the source wallet
    amount_to: int            # credited to the destination wallet
    fee_applied: int          # source-program points, credited to the house wallet
    rate: Decimal
    status: TransactionStatus = TransactionStatus.COMPLETED
    created_at: datetime | None = None


@dataclass(frozen=True)
class ConversionPricing:
    amount: int
    fee: int
    amount_to: int
    rate: Decimal
