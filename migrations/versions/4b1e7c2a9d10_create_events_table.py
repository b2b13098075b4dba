"""create events table

Revision ID: 4b1e7c2a9d10
Revises:
Create Date: 2026-10-18 16:55:12.482913

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "4b1e7c2a9d10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "events",
        sa.Column("event_id", sa.Integer(), primary_key=True),
        sa.Column("event_title", sa.String(length=80), nullable=False, server_default=""),
        sa.Column("event_desc", sa.Text(), nullable=False, server_default=""),
        sa.Column("event_start", sa.DateTime(), nullable=False),
        sa.Column("event_end", sa.DateTime(), nullable=False),
    )
    # 月の範囲検索用
    op.create_index("ix_events_event_start", "events", ["event_start"])


def downgrade():
    op.drop_index("ix_events_event_start", table_name="events")
    op.drop_table("events")
