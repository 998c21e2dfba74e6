"""Add reading_history table

Revision ID: 003
Revises: 002
Create Date: 2026-09-15 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "003"
down_revision = "002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "reading_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("story_id", sa.String(36), sa.ForeignKey("stories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("chapter_id", sa.String(36), nullable=True),
        sa.Column("progress", sa.Float, nullable=False, server_default="0"),
        sa.Column("current_chapter_number", sa.Integer, nullable=True),
        sa.Column("last_read_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "story_id", name="uq_reading_history_user_story"),
    )
    op.create_index("ix_reading_history_last_read_at", "reading_history", ["last_read_at"])


def downgrade() -> None:
    op.drop_table("reading_history")
