"""004: create conversion_transactions table

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE conversion_transactions (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            from_program    VARCHAR(20)     NOT NULL,
            to_program      VARCHAR(20)     NOT NULL,
            amount_from     BIGINT          NOT NULL,
            amount_to       BIGINT          NOT NULL,
            fee_applied     BIGINT          NOT NULL DEFAULT 0,
            rate            NUMERIC(30, 20) NOT NULL,
            status          VARCHAR(20)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_conv_amount_from_gt_0     CHECK (amount_from > 0),
            CONSTRAINT ck_conv_amount_to_gte_0      CHECK (amount_to >= 0),
            CONSTRAINT ck_conv_fee_gte_0            CHECK (fee_applied >= 0),
            CONSTRAINT ck_conv_status CHECK (status IN ('COMPLETED', 'FAILED'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_conv_user_id_desc ON conversion_transactions (user_id, id DESC);
    """)
    op.execute("COMMENT ON TABLE conversion_transactions IS 'Append-only conversion log';")
    op.execute("""
        CREATE TRIGGER trg_conv_append_only
            BEFORE UPDATE OR DELETE ON conversion_transactions
            FOR EACH ROW EXECUTE FUNCTION fn_reject_ledger_mutation();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS conversion_transactions CASCADE;")
