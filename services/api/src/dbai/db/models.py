"""ORM models for the engagement engine.

Tables are created by the Alembic migrations under alembic/versions;
the tests build the same schema with Base.metadata.create_all().
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dbai.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Daily topic rotation
# ---------------------------------------------------------------------------


class TopicItem(Base):
    """Curated topic in the daily rotation pool."""

    __tablename__ = "daily_topics"
    __table_args__ = (
        CheckConstraint("weight > 0", name="daily_topics_weight_check"),
        Index("idx_daily_topics_enabled", "enabled"),
        Index("idx_daily_topics_category", "category"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    presenter: Mapped[str] = mapped_column(String(128), nullable=False)
    presenter_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="general", server_default="general")
    weight: Mapped[float] = mapped_column(Float, nullable=False, default=1.0, server_default="1.0")
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class RotationRecord(Base):
    """One row per calendar date. UNIQUE(shown_date) makes the daily pick idempotent."""

    __tablename__ = "daily_topic_history"
    __table_args__ = (
        UniqueConstraint("shown_date", name="daily_topic_history_shown_date_key"),
        Index("idx_daily_topic_history_date", "shown_date"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    topic_id: Mapped[str] = mapped_column(String(64), ForeignKey("daily_topics.id"), nullable=False)
    shown_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    topic: Mapped[TopicItem] = relationship("TopicItem", lazy="joined")


# ---------------------------------------------------------------------------
# Streaks, points and stats
# ---------------------------------------------------------------------------


class UserStreak(Base):
    """Per-user daily streak and cumulative points."""

    __tablename__ = "user_streaks"
    __table_args__ = (
        Index("idx_user_streaks_points", "total_points"),
        Index("idx_user_streaks_streak", "current_streak"),
    )

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_active_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class UserStats(Base):
    """Lifetime and current-week debate counters; week_* are scoped to week_start."""

    __tablename__ = "user_stats"
    __table_args__ = (
        Index("idx_user_stats_debates", "total_debates"),
        Index("idx_user_stats_week", "week_debates"),
    )

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    total_debates: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_draws: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    week_debates: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    week_wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    week_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    week_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class UserProfile(Base):
    """Public profile owned by the profile service; only the handle is read here."""

    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
