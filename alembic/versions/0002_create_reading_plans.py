"""Create curated reading plan catalog

Revision ID: 0002_create_reading_plans
Revises: 0001_create_users
Create Date: 2026-09-14
"""
from alembic import op

revision = "0002_create_reading_plans"
down_revision = "0001_create_users"
branch_labels = None
depends_on = None


def upgrade():
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS reading_plans (
            id SERIAL PRIMARY KEY,
            slug TEXT NOT NULL UNIQUE,
            name TEXT NOT NULL,
            description TEXT,
            duration_days INTEGER NOT NULL DEFAULT 0 CHECK (duration_days >= 0),
            daily_structure JSONB NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_reading_plans_active
            ON reading_plans (is_active)
            WHERE is_active = TRUE;
        """
    )


def downgrade():
    op.execute(
        """
        DROP INDEX IF EXISTS idx_reading_plans_active;
        DROP TABLE IF EXISTS reading_plans;
        """
    )
