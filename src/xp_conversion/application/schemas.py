"""Pydantic schemas for the xp_conversion API."""

from pydantic import BaseModel, Field

from src.xp_common.enums import LoyaltyProgram
from src.xp_common.points import points_to_display
from src.xp_conversion.domain.models import Transaction


class ConvertRequest(BaseModel):
    from_program: LoyaltyProgram
    to_program: LoyaltyProgram
    amount: int = Field(..., gt=0, description="Source-program points to convert")


class TransactionResponse(BaseModel):
    id: str
    from_program: str
    to_program: str
    amount_from: int
    amount_to: int
    fee_applied: int
    fee_display: str
    rate: str
    status: str
    created_at: str

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionResponse":
        return cls(
            id=tx.id,
            from_program=tx.from_program,
            to_program=tx.to_program,
            amount_from=tx.amount_from,
            amount_to=tx.amount_to,
            fee_applied=tx.fee_applied,
            fee_display=points_to_display(tx.fee_applied),
            rate=str(tx.rate),
            status=tx.status.value,
            created_at=tx.created_at.isoformat() if tx.created_at else "",
        )


class ConversionQuoteResponse(BaseModel):
    from_program: str
    to_program: str
    amount_from: int
    amount_to: int
    fee: int
    rate: str
    rate_path: str
    tier: str
    monthly_points_before: int
    fee_free_remaining: int | None  # None = unlimited
    available_balance: int


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    next_cursor: str | None
    has_more: bool
