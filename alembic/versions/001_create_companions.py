"""001: create companions table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE companions (
            id              VARCHAR(64)     PRIMARY KEY,
            name            VARCHAR(64)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_companions_name_not_blank CHECK (LENGTH(TRIM(name)) > 0)
        );
    """)
    # Display names are unique case-insensitively
    op.execute("CREATE UNIQUE INDEX uq_companions_name_lower ON companions (LOWER(name));")
    op.execute("COMMENT ON TABLE companions IS 'Ride companions — id derived from the name at creation, never changed';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS companions CASCADE;")
