"""Add story_views table

Revision ID: 002
Revises: 001
Create Date: 2026-09-08 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "story_views",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("story_id", sa.String(36), sa.ForeignKey("stories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("ip", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index("ix_story_views_story_viewed_at", "story_views", ["story_id", "viewed_at"])
    op.create_index("ix_story_views_story_user", "story_views", ["story_id", "user_id", "viewed_at"])
    op.create_index("ix_story_views_story_ip", "story_views", ["story_id", "ip", "viewed_at"])


def downgrade() -> None:
    op.drop_table("story_views")
