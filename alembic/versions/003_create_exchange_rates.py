"""003: create exchange_rates table and seed initial rates

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# (from, to, rate): derived from each program's AUD value per point;
# the external feed appends newer rows that supersede these.
_SEED_RATES = [
    ("QANTAS", "XPOINTS", "0.6"), ("XPOINTS", "QANTAS", "1.6666666667"),
    ("GYG", "XPOINTS", "0.8"), ("XPOINTS", "GYG", "1.25"),
    ("VELOCITY", "XPOINTS", "0.7"), ("XPOINTS", "VELOCITY", "1.4285714286"),
    ("AMEX", "XPOINTS", "0.9"), ("XPOINTS", "AMEX", "1.1111111111"),
    ("FLYBUYS", "XPOINTS", "0.5"), ("XPOINTS", "FLYBUYS", "2"),
    ("HILTON", "XPOINTS", "0.4"), ("XPOINTS", "HILTON", "2.5"),
    ("MARRIOTT", "XPOINTS", "0.6"), ("XPOINTS", "MARRIOTT", "1.6666666667"),
    ("AIRBNB", "XPOINTS", "0.95"), ("XPOINTS", "AIRBNB", "1.0526315789"),
    ("DELTA", "XPOINTS", "0.65"), ("XPOINTS", "DELTA", "1.5384615385"),
    ("QANTAS", "GYG", "0.75"), ("GYG", "QANTAS", "1.3333333333"),
]


def upgrade() -> None:
    op.execute("""
        CREATE TABLE exchange_rates (
            id              BIGSERIAL       PRIMARY KEY,
            from_program    VARCHAR(20)     NOT NULL,
            to_program      VARCHAR(20)     NOT NULL,
            rate            NUMERIC(20, 10) NOT NULL,
            as_of           TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            source          VARCHAR(30)     NOT NULL DEFAULT 'feed',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_exchange_rates_positive   CHECK (rate > 0),
            CONSTRAINT ck_exchange_rates_distinct   CHECK (from_program <> to_program)
        );
    """)
    op.execute("""
        CREATE INDEX idx_exchange_rates_pair_as_of
            ON exchange_rates (from_program, to_program, as_of DESC);
    """)
    values = ",\n".join(
        f"('{src}', '{dst}', {rate}, 'seed')" for src, dst, rate in _SEED_RATES
    )
    op.execute(
        "INSERT INTO exchange_rates (from_program, to_program, rate, source) VALUES\n"
        + values
        + ";"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS exchange_rates CASCADE;")
