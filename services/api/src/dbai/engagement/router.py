"""Streak, points, and leaderboard endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.auth.dependencies import get_current_user_id, require_cron_secret, require_internal_secret
from dbai.cache import LEADERBOARD_CACHE_KEY, TTLCache, get_read_cache
from dbai.config import get_settings
from dbai.dependencies import get_db, get_optional_db, get_redis_dep
from dbai.engagement.events import emit_streak_update
from dbai.engagement.leaderboard_service import PERIODS, SORTS, get_leaderboard
from dbai.engagement.schemas import (
    CompletionRequest,
    CompletionResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
    ShareRequest,
    ShareResponse,
    StatsResponse,
    StreakAtRiskEntry,
    StreakResponse,
    StreakWarningsResponse,
)
from dbai.engagement.stats_service import get_stats
from dbai.engagement.streak_service import (
    POINTS,
    award_share_points,
    get_streak,
    get_streaks_at_risk,
    record_completion,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Engagement"])


# ── Scoring service ──


@router.post("/internal/completions", response_model=CompletionResponse, dependencies=[Depends(require_internal_secret)])
async def post_completion(
    body: CompletionRequest,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
    cache: TTLCache = Depends(get_read_cache),
):
    """Record a newly scored debate. Call once per debate; retries double-count."""
    result = await record_completion(
        db, redis, body.user_id, body.outcome, body.score, body.display_name,
    )
    cache.invalidate_prefix("leaderboard:")
    return CompletionResponse(**result)


@router.post("/internal/shares", response_model=ShareResponse, dependencies=[Depends(require_internal_secret)])
async def post_share(body: ShareRequest, db: AsyncSession = Depends(get_db)):
    """Award share points to a user who already has a streak row."""
    awarded = await award_share_points(db, body.user_id)
    return ShareResponse(awarded=awarded, points=POINTS["share"] if awarded else 0)


# ── Scheduler ──


@router.post("/cron/streak-warnings", response_model=StreakWarningsResponse, dependencies=[Depends(require_cron_secret)])
async def post_streak_warnings(
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
):
    """Publish a streak_warning event for every streak that ends at midnight UTC."""
    at_risk = await get_streaks_at_risk(db)
    for entry in at_risk:
        await emit_streak_update(
            redis, entry["user_id"], "streak_warning", entry["current_streak"], entry["longest_streak"],
        )
    logger.info("streak_warnings_sent", count=len(at_risk))
    return StreakWarningsResponse(
        warnings_sent=len(at_risk),
        users=[StreakAtRiskEntry(**e) for e in at_risk],
        timestamp=datetime.now(timezone.utc),
    )


# ── Streaks ──


@router.get("/users/me/streak", response_model=StreakResponse)
async def get_my_streak(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Current user's streak, points, and the points table."""
    data = await get_streak(db, user_id)
    return StreakResponse(**data, points_table=POINTS)


@router.get("/users/{user_id}/streak", response_model=StreakResponse)
async def get_user_streak(user_id: str, db: AsyncSession = Depends(get_db)):
    """Any user's public streak."""
    return StreakResponse(**await get_streak(db, user_id))


@router.get("/users/{user_id}/stats", response_model=StatsResponse)
async def get_user_stats(user_id: str, db: AsyncSession = Depends(get_db)):
    """Lifetime and current-week debate counters."""
    return StatsResponse(**await get_stats(db, user_id))


# ── Leaderboard ──


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard_endpoint(
    period: str = Query("alltime"),
    sort: str = Query("points"),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession | None = Depends(get_optional_db),
    cache: TTLCache = Depends(get_read_cache),
):
    """Ranked users. Degrades to an empty board if the store is unavailable."""
    if period not in PERIODS:
        raise HTTPException(status_code=400, detail=f"period must be one of {list(PERIODS)}")
    if sort not in SORTS:
        raise HTTPException(status_code=400, detail=f"sort must be one of {list(SORTS)}")

    settings = get_settings()
    limit = min(limit or settings.leaderboard_default_limit, settings.leaderboard_max_limit)
    key = LEADERBOARD_CACHE_KEY.format(period=period, sort=sort, limit=limit)

    entries = cache.get(key)
    if entries is None:
        entries = []
        if db is None:
            logger.warning("leaderboard_fallback", reason="database_not_configured")
        else:
            try:
                entries = await get_leaderboard(db, period, sort, limit)
                cache.set(key, entries, settings.leaderboard_cache_ttl_seconds)
            except SQLAlchemyError:
                logger.warning("leaderboard_fallback", reason="store_error", exc_info=True)
            except OSError:
                logger.warning("leaderboard_fallback", reason="store_unreachable", exc_info=True)

    return LeaderboardResponse(
        period=period,
        sort=sort,
        entries=[LeaderboardEntryResponse(**e) for e in entries],
    )
