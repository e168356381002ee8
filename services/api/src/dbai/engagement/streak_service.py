"""Daily debate streaks and points.

A streak counts consecutive UTC days with at least one scored debate.
Staleness is resolved lazily: readers report 0 once the last active day
is older than yesterday, and the stored row is only corrected by the
next completion. There is no decay sweep.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import NamedTuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.db.models import UserStreak
from dbai.engagement.events import emit_streak_update
from dbai.engagement.stats_service import OUTCOMES, apply_completion
from dbai.engagement.week_utils import is_streak_alive, utc_today, utc_yesterday
from dbai.errors import CompletionValidationError

logger = logging.getLogger(__name__)

POINTS: dict[str, int] = {
    "debate_complete": 10,
    "win": 5,
    "streak_bonus": 2,  # per day of current streak
    "share": 3,
}


class StreakTransition(NamedTuple):
    current_streak: int
    longest_streak: int
    already_active_today: bool
    event: str | None


def compute_transition(
    current_streak: int,
    longest_streak: int,
    last_active: date | None,
    today: date,
    yesterday: date,
) -> StreakTransition:
    """Next streak state for a completion on ``today``.

    event is None when the streak did not move (second debate of the day).
    """
    if last_active == today:
        return StreakTransition(current_streak or 1, max(longest_streak, current_streak or 1), True, None)
    if last_active == yesterday:
        current = current_streak + 1
        return StreakTransition(current, max(longest_streak, current), False, "streak_extended")
    event = "streak_reset" if last_active is not None else "streak_started"
    return StreakTransition(1, max(longest_streak, 1), False, event)


def compute_points(outcome: str, current_streak: int, already_active_today: bool) -> int:
    """Completion award, win award, and the once-a-day streak bonus."""
    points = POINTS["debate_complete"]
    if outcome == "win":
        points += POINTS["win"]
    if not already_active_today and current_streak > 1:
        points += POINTS["streak_bonus"] * current_streak
    return points


def effective_streak(current_streak: int, last_active: date | None, now: datetime | None = None) -> int:
    """Stored streak, or 0 once it has lapsed."""
    return current_streak if is_streak_alive(last_active, now) else 0


def _validate(outcome: str, score: float) -> None:
    if outcome not in OUTCOMES:
        raise CompletionValidationError("outcome", f"must be one of {sorted(OUTCOMES)}")
    if score < 0:
        raise CompletionValidationError("score", "must not be negative")


async def get_streak_row(db: AsyncSession, user_id: str) -> UserStreak | None:
    result = await db.execute(select(UserStreak).where(UserStreak.user_id == user_id))
    return result.scalar_one_or_none()


async def record_completion(
    db: AsyncSession,
    redis: object | None,
    user_id: str,
    outcome: str,
    score: float,
    display_name: str | None = None,
    *,
    now: datetime | None = None,
) -> dict:
    """Apply one newly scored debate to streak, points, and stats, then commit.

    Not idempotent: the scoring caller must invoke it once per debate.
    Concurrent completions for the same user may lose an update.
    """
    _validate(outcome, score)
    today = utc_today(now)
    yesterday = utc_yesterday(now)

    streak = await get_streak_row(db, user_id)
    if streak is None:
        streak = UserStreak(
            user_id=user_id,
            current_streak=0,
            longest_streak=0,
            last_active_date=None,
            total_points=0,
        )
        db.add(streak)

    transition = compute_transition(
        streak.current_streak, streak.longest_streak, streak.last_active_date, today, yesterday,
    )
    points_earned = compute_points(outcome, transition.current_streak, transition.already_active_today)

    streak.current_streak = transition.current_streak
    streak.longest_streak = transition.longest_streak
    streak.last_active_date = today
    streak.total_points += points_earned

    await apply_completion(db, user_id, outcome, score, display_name, now=now)
    await db.commit()

    logger.info(
        "Recorded %s for %s: +%d points, streak %d (longest %d)",
        outcome, user_id, points_earned, streak.current_streak, streak.longest_streak,
    )

    if transition.event is not None:
        await emit_streak_update(
            redis, user_id, transition.event, streak.current_streak, streak.longest_streak,
        )

    return {
        "points_earned": points_earned,
        "current_streak": streak.current_streak,
        "longest_streak": streak.longest_streak,
        "total_points": streak.total_points,
    }


async def get_streak(db: AsyncSession, user_id: str, now: datetime | None = None) -> dict:
    """Read-only streak view with the staleness rule applied."""
    streak = await get_streak_row(db, user_id)
    if streak is None:
        return {
            "current_streak": 0,
            "longest_streak": 0,
            "last_active_date": None,
            "total_points": 0,
            "active_today": False,
        }

    return {
        "current_streak": effective_streak(streak.current_streak, streak.last_active_date, now),
        "longest_streak": streak.longest_streak,
        "last_active_date": streak.last_active_date,
        "total_points": streak.total_points,
        "active_today": streak.last_active_date == utc_today(now),
    }


async def award_share_points(db: AsyncSession, user_id: str) -> bool:
    """Add the share award to an existing streak row. Returns False for unknown users."""
    result = await db.execute(
        update(UserStreak)
        .where(UserStreak.user_id == user_id)
        .values(total_points=UserStreak.total_points + POINTS["share"])
    )
    await db.commit()
    return result.rowcount > 0


async def get_streaks_at_risk(db: AsyncSession, now: datetime | None = None) -> list[dict]:
    """Users whose streak ends at the next UTC midnight unless they debate today."""
    result = await db.execute(
        select(UserStreak)
        .where(
            UserStreak.current_streak > 0,
            UserStreak.last_active_date == utc_yesterday(now),
        )
        .order_by(UserStreak.current_streak.desc(), UserStreak.user_id)
    )
    return [
        {
            "user_id": s.user_id,
            "current_streak": s.current_streak,
            "longest_streak": s.longest_streak,
        }
        for s in result.scalars()
    ]
