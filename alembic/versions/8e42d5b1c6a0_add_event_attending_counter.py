"""Add denormalized attending counter to events

Revision ID: 8e42d5b1c6a0
Revises: 3c1f0a9d2b7e
Create Date: 2026-10-06 16:03:27.904117

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '8e42d5b1c6a0'
down_revision: Union[str, None] = '3c1f0a9d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("ALTER TABLE events ADD COLUMN attending INTEGER NOT NULL DEFAULT 0")

    # Backfill from existing 'going' rows before the counter is trusted
    op.execute("""
        UPDATE events e
        SET attending = sub.going
        FROM (
            SELECT event_id, COUNT(*) AS going
            FROM rsvps
            WHERE status = 'going'
            GROUP BY event_id
        ) sub
        WHERE sub.event_id = e.id
    """)

    op.execute(
        "ALTER TABLE events ADD CONSTRAINT ck_event_attending_non_negative CHECK (attending >= 0)"
    )


def downgrade() -> None:
    op.execute("ALTER TABLE events DROP CONSTRAINT IF EXISTS ck_event_attending_non_negative")
    op.execute("ALTER TABLE events DROP COLUMN IF EXISTS attending")
