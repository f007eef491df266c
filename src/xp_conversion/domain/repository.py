"""TransactionLog Protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_conversion.domain.models import Transaction


class TransactionLogProtocol(Protocol):
    async def append(self, db: AsyncSession, tx: Transaction) -> Transaction: ...

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: str | None,
        limit: int,
    ) -> list[Transaction]:
        """Newest first, ids strictly below cursor_id."""
        ...
