"""Daily topic rotation and its history log.

One topic per UTC day, chosen by weighted random pick from the enabled
pool minus anything shown in the cooldown window. UNIQUE(shown_date) on
daily_topic_history makes the pick idempotent: a handler that loses the
insert race re-reads and returns the winner's topic.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from datetime import date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.db.models import RotationRecord, TopicItem
from dbai.engagement.events import emit_topic_rotated
from dbai.engagement.week_utils import utc_today
from dbai.errors import NoCandidatesError, WriteConflictError
from dbai.topics.pool_service import get_enabled_pool, topic_to_dict

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_DAYS = 30
FALLBACK_COOLDOWN_DAYS = 7


# ---------------------------------------------------------------------------
# History log
# ---------------------------------------------------------------------------


async def get_recently_shown_ids(db: AsyncSession, days: int, now: datetime | None = None) -> set[str]:
    """Topic ids shown on or after today - days."""
    cutoff = utc_today(now) - timedelta(days=days)
    result = await db.execute(
        select(RotationRecord.topic_id).where(RotationRecord.shown_date >= cutoff)
    )
    return set(result.scalars())


async def get_rotation_for_date(db: AsyncSession, day: date) -> RotationRecord | None:
    result = await db.execute(
        select(RotationRecord).where(RotationRecord.shown_date == day).limit(1)
    )
    return result.unique().scalar_one_or_none()


async def get_topic_history(db: AsyncSession, limit: int = 30) -> list[dict]:
    """Most recent rotations first."""
    result = await db.execute(
        select(RotationRecord).order_by(RotationRecord.shown_date.desc()).limit(limit)
    )
    return [
        {
            "date": record.shown_date,
            "topic_id": record.topic_id,
            "topic": record.topic.topic,
            "presenter": record.topic.presenter,
            "category": record.topic.category,
        }
        for record in result.unique().scalars()
    ]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def filter_candidates(
    pool: Sequence[TopicItem],
    recent_ids: set[str],
    fallback_recent_ids: set[str] | None = None,
) -> list[TopicItem]:
    """Apply the cooldown, relaxing it rather than ever returning nothing.

    pool minus recent_ids; if empty, pool minus fallback_recent_ids; if
    still empty, the whole pool.
    """
    candidates = [t for t in pool if t.id not in recent_ids]
    if candidates:
        return candidates
    if fallback_recent_ids is not None:
        candidates = [t for t in pool if t.id not in fallback_recent_ids]
        if candidates:
            return candidates
    return list(pool)


def weighted_pick(candidates: Sequence[TopicItem], rng: random.Random | None = None) -> TopicItem:
    """Pick with probability weight / total_weight.

    Draws u in [0, total) and walks the list subtracting weights; the first
    candidate that takes the remainder to <= 0 wins.
    """
    if not candidates:
        raise NoCandidatesError
    total = sum(t.weight for t in candidates)
    roll = (rng or random).random() * total
    for item in candidates:
        roll -= item.weight
        if roll <= 0:
            return item
    return candidates[-1]


async def select_for_today(
    db: AsyncSession,
    redis: object | None = None,
    *,
    cooldown_days: int = DEFAULT_COOLDOWN_DAYS,
    fallback_cooldown_days: int = FALLBACK_COOLDOWN_DAYS,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> TopicItem:
    """Return today's topic, choosing and recording it on first call of the day.

    Raises NoCandidatesError when no topic is enabled. Store errors
    propagate; the pick is never redrawn for a date that already has one.
    """
    today = utc_today(now)

    existing = await get_rotation_for_date(db, today)
    if existing is not None:
        return existing.topic

    pool = await get_enabled_pool(db)
    if not pool:
        raise NoCandidatesError

    recent = await get_recently_shown_ids(db, cooldown_days, now)
    candidates = [t for t in pool if t.id not in recent]
    if not candidates:
        logger.info("All %d topics shown in last %d days, relaxing to %d", len(pool), cooldown_days, fallback_cooldown_days)
        fallback_recent = await get_recently_shown_ids(db, fallback_cooldown_days, now)
        candidates = filter_candidates(pool, recent, fallback_recent)

    selected = weighted_pick(candidates, rng)
    selected_id = selected.id

    db.add(RotationRecord(topic_id=selected_id, shown_date=today))
    try:
        await db.commit()
    except IntegrityError:
        # Another handler recorded today's pick first; theirs stands
        await db.rollback()
        winner = await get_rotation_for_date(db, today)
        if winner is None:
            raise WriteConflictError(f"Rotation insert for {today} rejected but no row found") from None
        logger.info("Lost rotation race for %s, using %s", today, winner.topic_id)
        return winner.topic

    logger.info("Daily topic for %s: %s [%s]", today, selected_id, selected.category)
    await emit_topic_rotated(redis, {"date": today.isoformat(), **topic_to_dict(selected)})
    return selected
