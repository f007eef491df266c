"""006: create trade_offers table

Revision ID: 006
Revises: 005
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE trade_offers (
            id                  VARCHAR(64)     PRIMARY KEY,
            creator_id          VARCHAR(64)     NOT NULL,
            from_program        VARCHAR(20)     NOT NULL,
            to_program          VARCHAR(20)     NOT NULL,
            amount_offered      BIGINT          NOT NULL,
            amount_requested    BIGINT          NOT NULL,
            custom_rate         NUMERIC(30, 10) NOT NULL,
            market_rate         NUMERIC(30, 20),
            savings_pct         NUMERIC(12, 4),
            status              VARCHAR(20)     NOT NULL DEFAULT 'ACTIVE',
            description         VARCHAR(500),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            expires_at          TIMESTAMPTZ     NOT NULL,
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_offers_amount_offered_gt_0    CHECK (amount_offered > 0),
            CONSTRAINT ck_offers_amount_requested_gt_0  CHECK (amount_requested > 0),
            CONSTRAINT ck_offers_distinct_programs      CHECK (from_program <> to_program),
            CONSTRAINT ck_offers_status CHECK (
                status IN ('ACTIVE', 'COMPLETED', 'CANCELLED', 'EXPIRED')
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_trade_offers_updated_at
            BEFORE UPDATE ON trade_offers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE INDEX idx_offers_active_expires ON trade_offers (expires_at)
            WHERE status = 'ACTIVE';
    """)
    op.execute("CREATE INDEX idx_offers_creator ON trade_offers (creator_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trade_offers CASCADE;")
