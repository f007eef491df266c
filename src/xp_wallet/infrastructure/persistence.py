"""WalletRepository — concrete implementation of WalletStoreProtocol.

All balance-mutating operations are atomic PostgreSQL UPDATE ... RETURNING
statements guarded by `>= :amount`. Zero rows back means the guard failed
(insufficient funds or no such wallet) and nothing was written.

Transaction ownership: the CALLER commits or rolls back.
"""

from sqlalchemy import TextClause, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.errors import (
    InsufficientBalanceError,
    InternalError,
    WalletNotFoundError,
)
from src.xp_wallet.domain.models import Wallet

_COLUMNS = """
    id, user_id, program, available_balance, escrowed_balance, version,
    created_at, updated_at
"""

_GET_WALLET_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM wallets
    WHERE user_id = :user_id AND program = :program
""")

_LIST_WALLETS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM wallets
    WHERE user_id = :user_id
    ORDER BY program
""")

_DEBIT_SQL = text(f"""
    UPDATE wallets
    SET available_balance = available_balance - :amount,
        version = version + 1
    WHERE user_id = :user_id AND program = :program
      AND available_balance >= :amount
    RETURNING {_COLUMNS}
""")

_CREDIT_SQL = text(f"""
    INSERT INTO wallets (user_id, program, available_balance)
    VALUES (:user_id, :program, :amount)
    ON CONFLICT (user_id, program) DO UPDATE
        SET available_balance = wallets.available_balance + EXCLUDED.available_balance,
            version = wallets.version + 1
    RETURNING {_COLUMNS}
""")

_ESCROW_SQL = text(f"""
    UPDATE wallets
    SET available_balance = available_balance - :amount,
        escrowed_balance  = escrowed_balance  + :amount,
        version = version + 1
    WHERE user_id = :user_id AND program = :program
      AND available_balance >= :amount
    RETURNING {_COLUMNS}
""")

_RELEASE_ESCROW_SQL = text(f"""
    UPDATE wallets
    SET available_balance = available_balance + :amount,
        escrowed_balance  = escrowed_balance  - :amount,
        version = version + 1
    WHERE user_id = :user_id AND program = :program
      AND escrowed_balance >= :amount
    RETURNING {_COLUMNS}
""")

_CONSUME_ESCROW_SQL = text(f"""
    UPDATE wallets
    SET escrowed_balance = escrowed_balance - :amount,
        version = version + 1
    WHERE user_id = :user_id AND program = :program
      AND escrowed_balance >= :amount
    RETURNING {_COLUMNS}
""")


def _row_to_wallet(row: object) -> Wallet:
    return Wallet(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        program=row.program,  # type: ignore[attr-defined]
        available_balance=row.available_balance,  # type: ignore[attr-defined]
        escrowed_balance=row.escrowed_balance,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class WalletRepository:
    """Concrete store — every mutation is one guarded statement."""

    async def get_wallet(
        self, db: AsyncSession, user_id: str, program: str
    ) -> Wallet | None:
        result = await db.execute(_GET_WALLET_SQL, {"user_id": user_id, "program": program})
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def list_wallets(self, db: AsyncSession, user_id: str) -> list[Wallet]:
        result = await db.execute(_LIST_WALLETS_SQL, {"user_id": user_id})
        return [_row_to_wallet(row) for row in result.fetchall()]

    async def debit(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        return await self._guarded_available(db, _DEBIT_SQL, user_id, program, amount)

    async def credit(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        result = await db.execute(
            _CREDIT_SQL, {"user_id": user_id, "program": program, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Wallet upsert returned no rows")
        return _row_to_wallet(row)

    async def escrow(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        return await self._guarded_available(db, _ESCROW_SQL, user_id, program, amount)

    async def release_escrow(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        return await self._guarded_escrow(db, _RELEASE_ESCROW_SQL, user_id, program, amount)

    async def consume_escrow(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> Wallet:
        return await self._guarded_escrow(db, _CONSUME_ESCROW_SQL, user_id, program, amount)

    async def _guarded_available(
        self, db: AsyncSession, sql: TextClause, user_id: str, program: str, amount: int
    ) -> Wallet:
        result = await db.execute(
            sql, {"user_id": user_id, "program": program, "amount": amount}
        )
        row = result.fetchone()
        if row is not None:
            return _row_to_wallet(row)
        current = await self.get_wallet(db, user_id, program)
        if current is None:
            raise WalletNotFoundError(program)
        raise InsufficientBalanceError(program, amount, current.available_balance)

    async def _guarded_escrow(
        self, db: AsyncSession, sql: TextClause, user_id: str, program: str, amount: int
    ) -> Wallet:
        result = await db.execute(
            sql, {"user_id": user_id, "program": program, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            # escrow is only ever moved for offers that reserved it
            raise InternalError(f"Escrow of {amount} {program} points not held")
        return _row_to_wallet(row)
