"""Daily topic rotation tables.

Creates daily_topics (the curated pool) and daily_topic_history (one row
per UTC date, UNIQUE(shown_date)).

Revision ID: 001_topic_rotation_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_topic_rotation_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Topic pool ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS daily_topics (
            id VARCHAR(64) PRIMARY KEY,
            topic TEXT NOT NULL,
            presenter VARCHAR(128) NOT NULL,
            presenter_id VARCHAR(64),
            category VARCHAR(64) NOT NULL DEFAULT 'general',
            weight DOUBLE PRECISION NOT NULL DEFAULT 1.0 CHECK (weight > 0),
            enabled BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_daily_topics_enabled
        ON daily_topics(enabled)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_daily_topics_category
        ON daily_topics(category)
    """)

    # --- Rotation history ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS daily_topic_history (
            id VARCHAR(64) PRIMARY KEY,
            topic_id VARCHAR(64) NOT NULL REFERENCES daily_topics(id),
            shown_date DATE NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT daily_topic_history_shown_date_key UNIQUE (shown_date)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_daily_topic_history_date
        ON daily_topic_history(shown_date DESC)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS daily_topic_history")
    op.execute("DROP TABLE IF EXISTS daily_topics")
