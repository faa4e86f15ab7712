"""Add per-user daily chapter minimum for streaks

Revision ID: 0004_add_streak_minimum
Revises: 0003_user_reading_plan_tracking
Create Date: 2026-09-28
"""
from alembic import op

revision = "0004_add_streak_minimum"
down_revision = "0003_user_reading_plan_tracking"
branch_labels = None
depends_on = None


def upgrade():
    op.execute(
        """
        ALTER TABLE users
            ADD COLUMN IF NOT EXISTS streak_minimum INTEGER NOT NULL DEFAULT 3
            CHECK (streak_minimum >= 1);
        """
    )


def downgrade():
    op.execute("ALTER TABLE users DROP COLUMN IF EXISTS streak_minimum;")
