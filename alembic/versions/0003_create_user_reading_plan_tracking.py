"""Add tables for tracking user reading plan progress

Revision ID: 0003_user_reading_plan_tracking
Revises: 0002_create_reading_plans
Create Date: 2026-09-15
"""
from alembic import op


revision = "0003_user_reading_plan_tracking"
down_revision = "0002_create_reading_plans"
branch_labels = None
depends_on = None


def upgrade():
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS user_reading_plans (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            plan_id INTEGER NOT NULL REFERENCES reading_plans(id) ON DELETE CASCADE,
            start_date DATE NOT NULL DEFAULT CURRENT_DATE,
            current_day INTEGER NOT NULL DEFAULT 1 CHECK (current_day >= 1),
            list_positions JSONB NOT NULL DEFAULT '{}'::jsonb,
            is_completed BOOLEAN NOT NULL DEFAULT FALSE,
            completed_at TIMESTAMPTZ,
            is_archived BOOLEAN NOT NULL DEFAULT FALSE,
            version INTEGER NOT NULL DEFAULT 0,
            nickname TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_user_reading_plans_user
            ON user_reading_plans (user_id);

        CREATE INDEX IF NOT EXISTS idx_user_reading_plans_user_visible
            ON user_reading_plans (user_id, is_archived)
            WHERE is_archived = FALSE;

        CREATE TABLE IF NOT EXISTS daily_progress (
            id SERIAL PRIMARY KEY,
            user_plan_id INTEGER NOT NULL REFERENCES user_reading_plans(id) ON DELETE CASCADE,
            progress_date DATE NOT NULL,
            day_number INTEGER NOT NULL DEFAULT 1,
            completed_sections TEXT[] NOT NULL DEFAULT '{}',
            is_complete BOOLEAN NOT NULL DEFAULT FALSE,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (user_plan_id, progress_date)
        );

        CREATE INDEX IF NOT EXISTS idx_daily_progress_date
            ON daily_progress (progress_date);
        """
    )


def downgrade():
    op.execute(
        """
        DROP INDEX IF EXISTS idx_daily_progress_date;
        DROP TABLE IF EXISTS daily_progress;

        DROP INDEX IF EXISTS idx_user_reading_plans_user_visible;
        DROP INDEX IF EXISTS idx_user_reading_plans_user;
        DROP TABLE IF EXISTS user_reading_plans;
        """
    )
