"""Streak, stats, and profile tables.

Creates user_streaks, user_stats, and user_profiles (the latter is owned
by the profile service and only read here for leaderboard handles).

Revision ID: 002_streak_stats_tables
Revises: 001_topic_rotation_tables
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "002_streak_stats_tables"
down_revision: str | None = "001_topic_rotation_tables"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Streaks + points ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_streaks (
            user_id VARCHAR(128) PRIMARY KEY,
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            last_active_date DATE,
            total_points INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CHECK (current_streak >= 0),
            CHECK (longest_streak >= current_streak),
            CHECK (total_points >= 0)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_streaks_points
        ON user_streaks(total_points DESC)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_streaks_streak
        ON user_streaks(current_streak DESC)
    """)

    # --- Lifetime + weekly stats ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_stats (
            user_id VARCHAR(128) PRIMARY KEY,
            display_name VARCHAR(128),
            total_debates INTEGER NOT NULL DEFAULT 0,
            total_wins INTEGER NOT NULL DEFAULT 0,
            total_draws INTEGER NOT NULL DEFAULT 0,
            total_losses INTEGER NOT NULL DEFAULT 0,
            total_score DOUBLE PRECISION NOT NULL DEFAULT 0,
            week_debates INTEGER NOT NULL DEFAULT 0,
            week_wins INTEGER NOT NULL DEFAULT 0,
            week_score DOUBLE PRECISION NOT NULL DEFAULT 0,
            week_start DATE,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_stats_debates
        ON user_stats(total_debates DESC)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_stats_week
        ON user_stats(week_debates DESC)
    """)

    # --- Profiles (read-only here) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_profiles (
            user_id VARCHAR(128) PRIMARY KEY,
            username VARCHAR(64) NOT NULL UNIQUE,
            display_name VARCHAR(128) NOT NULL,
            bio TEXT,
            is_public BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_profiles")
    op.execute("DROP TABLE IF EXISTS user_stats")
    op.execute("DROP TABLE IF EXISTS user_streaks")
