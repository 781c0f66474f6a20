"""002: create trips table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE trips (
            companion_id    VARCHAR(64)     NOT NULL REFERENCES companions (id),
            trip_date       DATE            NOT NULL,
            outbound        BOOLEAN         NOT NULL DEFAULT FALSE,
            return_leg      BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_trips PRIMARY KEY (companion_id, trip_date)
        );
    """)
    op.execute("COMMENT ON TABLE trips IS 'One row per companion per travel day — upserted, never appended';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trips CASCADE;")
