"""005: create user_stats table

Revision ID: 005
Revises: 004
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE user_stats (
            user_id             VARCHAR(64) PRIMARY KEY,
            monthly_points      BIGINT      NOT NULL DEFAULT 0,
            points_converted    BIGINT      NOT NULL DEFAULT 0,
            fees_paid           BIGINT      NOT NULL DEFAULT 0,
            tier                VARCHAR(20) NOT NULL DEFAULT 'STANDARD',
            period_start        TIMESTAMPTZ NOT NULL,
            tier_expires_at     TIMESTAMPTZ,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_user_stats_monthly_gte_0  CHECK (monthly_points >= 0),
            CONSTRAINT ck_user_stats_total_gte_0    CHECK (points_converted >= 0),
            CONSTRAINT ck_user_stats_fees_gte_0     CHECK (fees_paid >= 0),
            CONSTRAINT ck_user_stats_tier CHECK (tier IN ('STANDARD', 'SILVER', 'GOLD', 'PLATINUM'))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_user_stats_updated_at
            BEFORE UPDATE ON user_stats
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("CREATE INDEX idx_user_stats_period_start ON user_stats (period_start);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_stats CASCADE;")
