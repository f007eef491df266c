"""007: create trade_transactions table

Revision ID: 007
Revises: 006
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE trade_transactions (
            id                  VARCHAR(64)     PRIMARY KEY,
            offer_id            VARCHAR(64)     NOT NULL REFERENCES trade_offers (id),
            seller_id           VARCHAR(64)     NOT NULL,
            buyer_id            VARCHAR(64)     NOT NULL,
            from_program        VARCHAR(20)     NOT NULL,
            to_program          VARCHAR(20)     NOT NULL,
            amount_sold         BIGINT          NOT NULL,
            amount_bought       BIGINT          NOT NULL,
            rate                NUMERIC(30, 10) NOT NULL,
            seller_fee          BIGINT          NOT NULL DEFAULT 0,
            buyer_fee           BIGINT          NOT NULL DEFAULT 0,
            facilitation_fee    BIGINT          GENERATED ALWAYS AS (seller_fee + buyer_fee) STORED,
            completed_at        TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_trade_tx_offer            UNIQUE (offer_id),
            CONSTRAINT ck_trade_tx_fees_gte_0       CHECK (seller_fee >= 0 AND buyer_fee >= 0),
            CONSTRAINT ck_trade_tx_no_self_trade    CHECK (seller_id <> buyer_id)
        );
    """)
    op.execute("CREATE INDEX idx_trade_tx_seller ON trade_transactions (seller_id, completed_at DESC);")
    op.execute("CREATE INDEX idx_trade_tx_buyer ON trade_transactions (buyer_id, completed_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_trade_tx_append_only
            BEFORE UPDATE OR DELETE ON trade_transactions
            FOR EACH ROW EXECUTE FUNCTION fn_reject_ledger_mutation();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trade_transactions CASCADE;")
