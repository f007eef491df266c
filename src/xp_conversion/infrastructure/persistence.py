"""TransactionLogRepository — append-only `conversion_transactions`."""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.enums import TransactionStatus
from src.xp_common.errors import InternalError
from src.xp_conversion.domain.models import Transaction

_COLUMNS = """
    id, user_id, from_program, to_program, amount_from, amount_to,
    fee_applied, rate, status, created_at
"""

_INSERT_TX_SQL = text(f"""
    INSERT INTO conversion_transactions
        (id, user_id, from_program, to_program, amount_from, amount_to,
         fee_applied, rate, status)
    VALUES
        (:id, :user_id, :from_program, :to_program, :amount_from, :amount_to,
         :fee_applied, :rate, :status)
    RETURNING {_COLUMNS}
""")

_LIST_TX_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM conversion_transactions
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS VARCHAR) IS NULL OR id < CAST(:cursor_id AS VARCHAR))
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_tx(row: object) -> Transaction:
    return Transaction(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        from_program=row.from_program,  # type: ignore[attr-defined]
        to_program=row.to_program,  # type: ignore[attr-defined]
        amount_from=row.amount_from,  # type: ignore[attr-defined]
        amount_to=row.amount_to,  # type: ignore[attr-defined]
        fee_applied=row.fee_applied,  # type: ignore[attr-defined]
        rate=Decimal(row.rate),  # type: ignore[attr-defined]
        status=TransactionStatus(row.status),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class TransactionLogRepository:
    async def append(self, db: AsyncSession, tx: Transaction) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "id": tx.id,
                "user_id": tx.user_id,
                "from_program": tx.from_program,
                "to_program": tx.to_program,
                "amount_from": tx.amount_from,
                "amount_to": tx.amount_to,
                "fee_applied": tx.fee_applied,
                "rate": tx.rate,
                "status": TransactionStatus(tx.status).value,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        return _row_to_tx(row)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: str | None,
        limit: int,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TX_SQL, {"user_id": user_id, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_tx(row) for row in result.fetchall()]
