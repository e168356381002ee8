"""Per-user debate stats: lifetime totals and the rolling ISO-week window."""

from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.db.models import UserStats
from dbai.engagement.week_utils import current_week_start

logger = logging.getLogger(__name__)

OUTCOMES = frozenset({"win", "loss", "draw"})


def roll_week(stats: UserStats, week_start: date) -> bool:
    """Zero the week counters if stats belong to another week. Returns True on rollover."""
    if stats.week_start == week_start:
        return False
    stats.week_debates = 0
    stats.week_wins = 0
    stats.week_score = 0.0
    stats.week_start = week_start
    return True


def _count(stats: UserStats, outcome: str, score: float) -> None:
    win = 1 if outcome == "win" else 0
    stats.total_debates += 1
    stats.total_wins += win
    stats.total_draws += 1 if outcome == "draw" else 0
    stats.total_losses += 1 if outcome == "loss" else 0
    stats.total_score += score
    stats.week_debates += 1
    stats.week_wins += win
    stats.week_score += score


async def get_stats_row(db: AsyncSession, user_id: str) -> UserStats | None:
    result = await db.execute(select(UserStats).where(UserStats.user_id == user_id))
    return result.scalar_one_or_none()


async def apply_completion(
    db: AsyncSession,
    user_id: str,
    outcome: str,
    score: float,
    display_name: str | None = None,
    *,
    now: datetime | None = None,
) -> UserStats:
    """Fold one scored debate into the user's stats. Flushes, does not commit.

    Lifetime counters always grow. Week counters grow while the stored
    week_start is the current ISO week and restart from this completion
    otherwise.
    """
    week_start = current_week_start(now)
    stats = await get_stats_row(db, user_id)

    if stats is None:
        stats = UserStats(
            user_id=user_id,
            display_name=display_name or None,
            total_debates=0,
            total_wins=0,
            total_draws=0,
            total_losses=0,
            total_score=0.0,
            week_debates=0,
            week_wins=0,
            week_score=0.0,
            week_start=week_start,
        )
        db.add(stats)
    else:
        if roll_week(stats, week_start):
            logger.debug("Week rollover for %s, new week_start %s", user_id, week_start)
        if display_name:
            stats.display_name = display_name

    _count(stats, outcome, score)
    await db.flush()
    return stats


async def get_stats(db: AsyncSession, user_id: str, now: datetime | None = None) -> dict:
    """Lifetime and current-week counters without touching storage."""
    stats = await get_stats_row(db, user_id)
    if stats is None:
        return {
            "total_debates": 0, "total_wins": 0, "total_draws": 0, "total_losses": 0,
            "total_score": 0.0, "week_debates": 0, "week_wins": 0, "week_score": 0.0,
            "week_start": current_week_start(now),
        }

    this_week = stats.week_start == current_week_start(now)
    return {
        "total_debates": stats.total_debates,
        "total_wins": stats.total_wins,
        "total_draws": stats.total_draws,
        "total_losses": stats.total_losses,
        "total_score": stats.total_score,
        "week_debates": stats.week_debates if this_week else 0,
        "week_wins": stats.week_wins if this_week else 0,
        "week_score": stats.week_score if this_week else 0.0,
        "week_start": current_week_start(now),
    }
