"""003: create payments table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payments (
            id              VARCHAR(64)     PRIMARY KEY,
            companion_id    VARCHAR(64)     NOT NULL REFERENCES companions (id),
            amount_cents    BIGINT          NOT NULL,
            paid_at         TIMESTAMPTZ     NOT NULL,
            note            VARCHAR(500),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_payments_companion_time ON payments (companion_id, paid_at);")
    op.execute("COMMENT ON TABLE payments IS 'Payments — signed amounts in cents; transfer rewrites companion_id only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payments CASCADE;")
