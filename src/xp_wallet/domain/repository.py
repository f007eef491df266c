"""WalletStore Protocol — dependency inversion for testability.

Every mutation is a single conditional statement: it either applies in full
or raises, and never drives a balance negative. Callers own the transaction
(commit/rollback) and the in-process wallet locks.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_wallet.domain.models import Wallet


class WalletStoreProtocol(Protocol):
    async def get_wallet(
        self, db: AsyncSession, user_id: str, program: str
    ) -> Wallet | None: ...

    async def list_wallets(self, db: AsyncSession, user_id: str) -> list[Wallet]: ...

    async def debit(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        """available -= amount. InsufficientBalanceError / WalletNotFoundError."""
        ...

    async def credit(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        """available += amount, creating the wallet if it does not exist."""
        ...

    async def escrow(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        """available -> escrowed. InsufficientBalanceError / WalletNotFoundError."""
        ...

    async def release_escrow(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        """escrowed -> available (offer cancelled or expired)."""
        ...

    async def consume_escrow(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        """escrowed -= amount (offer filled; points leave the wallet)."""
        ...
