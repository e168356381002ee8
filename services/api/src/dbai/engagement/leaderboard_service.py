"""Leaderboard queries, derived on read from user_stats and user_streaks.

Nothing here is stored. Rank is the output position, and the streak and
average score are recomputed for every read.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import case, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.db.models import UserProfile, UserStats, UserStreak
from dbai.engagement.streak_service import effective_streak
from dbai.engagement.week_utils import current_week_start, utc_today, utc_yesterday

logger = logging.getLogger(__name__)

PERIODS = ("weekly", "alltime")
SORTS = ("points", "streak", "debates", "avg_score")

MIN_DEBATES_FOR_AVG = 3
MAX_LIMIT = 100


def _period_columns(period: str, now: datetime | None):
    """(debates, wins, score) SQL expressions for the period.

    Weekly counters only count when week_start is the current week; a row
    last touched in an earlier week has nothing in this one.
    """
    if period == "alltime":
        return UserStats.total_debates, UserStats.total_wins, UserStats.total_score

    this_week = UserStats.week_start == current_week_start(now)
    debates = case((this_week, UserStats.week_debates), else_=literal(0))
    wins = case((this_week, UserStats.week_wins), else_=literal(0))
    score = case((this_week, UserStats.week_score), else_=literal(0.0))
    return debates, wins, score


async def get_leaderboard(
    db: AsyncSession,
    period: str = "alltime",
    sort: str = "points",
    limit: int = 25,
    *,
    now: datetime | None = None,
) -> list[dict]:
    """Ranked rows for period × sort.

    avg_score needs at least MIN_DEBATES_FOR_AVG debates in the period so a
    single lucky debate cannot top the board; other sorts need one.
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown period: {period}")
    if sort not in SORTS:
        raise ValueError(f"Unknown sort: {sort}")
    limit = max(1, min(limit, MAX_LIMIT))

    debates, wins, score = _period_columns(period, now)
    avg = case((debates > 0, score / debates), else_=literal(0.0))
    alive = UserStreak.last_active_date.in_([utc_today(now), utc_yesterday(now)])
    live_streak = case((alive, UserStreak.current_streak), else_=literal(0))

    order_by = {
        "points": [UserStreak.total_points.desc()],
        "streak": [live_streak.desc(), UserStreak.longest_streak.desc()],
        "debates": [debates.desc()],
        "avg_score": [avg.desc()],
    }[sort]
    min_debates = MIN_DEBATES_FOR_AVG if sort == "avg_score" else 1

    stmt = (
        select(
            UserStats.user_id,
            UserStats.display_name,
            debates.label("debates"),
            wins.label("wins"),
            score.label("score"),
            UserStreak.current_streak,
            UserStreak.longest_streak,
            UserStreak.last_active_date,
            UserStreak.total_points,
            UserProfile.username,
        )
        .join(UserStreak, UserStreak.user_id == UserStats.user_id)
        .outerjoin(UserProfile, UserProfile.user_id == UserStats.user_id)
        .where(debates >= min_debates)
        .order_by(*order_by, UserStats.user_id.asc())
        .limit(limit)
    )
    result = await db.execute(stmt)

    rows = []
    for position, r in enumerate(result, start=1):
        period_debates = int(r.debates or 0)
        period_score = float(r.score or 0)
        rows.append({
            "rank": position,
            "user_id": r.user_id,
            "display_name": r.display_name,
            "username": r.username,
            "debates": period_debates,
            "wins": int(r.wins or 0),
            "current_streak": effective_streak(r.current_streak, r.last_active_date, now),
            "longest_streak": r.longest_streak,
            "avg_score": round(period_score / period_debates, 1) if period_debates > 0 else 0.0,
            "total_points": r.total_points,
        })

    logger.debug("Leaderboard %s/%s: %d rows", period, sort, len(rows))
    return rows
