"""Pydantic schemas for the xp_wallet API."""

from pydantic import BaseModel, Field

from src.xp_common.enums import LoyaltyProgram
from src.xp_common.points import points_to_display
from src.xp_wallet.domain.models import Wallet


class WalletItem(BaseModel):
    program: str
    available_balance: int
    escrowed_balance: int
    balance: int
    balance_display: str

    @classmethod
    def from_domain(cls, wallet: Wallet) -> "WalletItem":
        return cls(
            program=wallet.program,
            available_balance=wallet.available_balance,
            escrowed_balance=wallet.escrowed_balance,
            balance=wallet.balance,
            balance_display=points_to_display(wallet.balance),
        )


class WalletListResponse(BaseModel):
    user_id: str
    wallets: list[WalletItem]


class CreditWalletRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    program: LoyaltyProgram
    amount: int = Field(..., gt=0, description="Points to credit")
