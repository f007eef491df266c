"""002: create wallets table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wallets (
            id                  BIGSERIAL   PRIMARY KEY,
            user_id             VARCHAR(64) NOT NULL,
            program             VARCHAR(20) NOT NULL,
            available_balance   BIGINT      NOT NULL DEFAULT 0,
            escrowed_balance    BIGINT      NOT NULL DEFAULT 0,
            version             BIGINT      NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_wallets_user_program      UNIQUE (user_id, program),
            CONSTRAINT ck_wallets_available_gte_0   CHECK (available_balance >= 0),
            CONSTRAINT ck_wallets_escrowed_gte_0    CHECK (escrowed_balance >= 0),
            CONSTRAINT ck_wallets_program CHECK (program IN (
                'QANTAS', 'GYG', 'XPOINTS', 'VELOCITY', 'AMEX',
                'FLYBUYS', 'HILTON', 'MARRIOTT', 'AIRBNB', 'DELTA'
            ))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_wallets_updated_at
            BEFORE UPDATE ON wallets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE wallets IS 'Per-program points balances; all amounts in whole points';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wallets CASCADE;")
