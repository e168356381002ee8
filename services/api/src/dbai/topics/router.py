"""Daily topic endpoints: public read, scheduler rotate, admin CRUD."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.auth.dependencies import require_admin, require_cron_secret
from dbai.cache import DAILY_TOPIC_CACHE_KEY, TTLCache, get_read_cache
from dbai.config import get_settings
from dbai.dependencies import get_db, get_optional_db, get_redis_dep
from dbai.engagement.week_utils import utc_today
from dbai.errors import NoCandidatesError, TopicInUseError, TopicNotFoundError, WriteConflictError
from dbai.topics.pool_service import (
    add_topic,
    count_topics,
    delete_topic,
    disable_topic,
    get_topic,
    list_topics,
    topic_to_dict,
    update_topic,
)
from dbai.topics.rotation_service import get_topic_history, select_for_today
from dbai.topics.schemas import (
    AdminTopicListResponse,
    AdminTopicResponse,
    DailyTopicResponse,
    HistoryEntryResponse,
    RotationResponse,
    SeedResponse,
    TopicCountResponse,
    TopicCreateRequest,
    TopicHistoryResponse,
    TopicResponse,
    TopicUpdateRequest,
)
from dbai.topics.seed import FALLBACK_TOPIC, seed_topics

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Topics"])


# ── Public ──


@router.get("/topics/daily", response_model=DailyTopicResponse)
async def get_daily_topic(
    history: bool = Query(False),
    history_limit: int = Query(7, ge=1, le=100),
    db: AsyncSession | None = Depends(get_optional_db),
    redis: object | None = Depends(get_redis_dep),
    cache: TTLCache = Depends(get_read_cache),
):
    """Today's topic, rotating on demand. Falls back to a static topic, never errors."""
    settings = get_settings()
    today = utc_today()

    payload = cache.get(DAILY_TOPIC_CACHE_KEY)
    if payload is None or payload["date"] != today:
        payload = await _load_daily_topic(db, redis)
        if payload["source"] == "db":
            cache.set(DAILY_TOPIC_CACHE_KEY, payload, settings.daily_topic_cache_ttl_seconds)

    response = DailyTopicResponse(date=today, topic=TopicResponse(**payload["topic"]), source=payload["source"])
    if history and db is not None and payload["source"] == "db":
        try:
            entries = await get_topic_history(db, history_limit)
            response.history = [HistoryEntryResponse(**e) for e in entries]
        except (SQLAlchemyError, OSError):
            logger.warning("topic_history_unavailable", exc_info=True)
    return response


async def _load_daily_topic(db: AsyncSession | None, redis: object | None) -> dict:
    today = utc_today()
    fallback = {"date": today, "topic": dict(FALLBACK_TOPIC), "source": "fallback"}
    if db is None:
        logger.warning("daily_topic_fallback", reason="database_not_configured")
        return fallback

    settings = get_settings()
    try:
        item = await select_for_today(
            db,
            redis,
            cooldown_days=settings.rotation_cooldown_days,
            fallback_cooldown_days=settings.rotation_fallback_cooldown_days,
        )
    except NoCandidatesError:
        logger.error("rotation_pool_empty")
        return fallback
    except (SQLAlchemyError, WriteConflictError):
        logger.warning("daily_topic_fallback", reason="store_error", exc_info=True)
        return fallback
    except OSError:
        # Connection refused or DNS failure before the driver is wrapped
        logger.warning("daily_topic_fallback", reason="store_unreachable", exc_info=True)
        return fallback

    return {"date": today, "topic": topic_to_dict(item), "source": "db"}


@router.get("/topics/history", response_model=TopicHistoryResponse)
async def get_history(
    limit: int | None = Query(None, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
):
    """Past daily topics, most recent first."""
    entries = await get_topic_history(db, limit or get_settings().topic_history_default_limit)
    return TopicHistoryResponse(history=[HistoryEntryResponse(**e) for e in entries])


# ── Scheduler ──


@router.post("/cron/rotate-topic", response_model=RotationResponse, dependencies=[Depends(require_cron_secret)])
async def rotate_topic(
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
    cache: TTLCache = Depends(get_read_cache),
):
    """Make sure today's topic is chosen. Safe to call any number of times."""
    settings = get_settings()
    try:
        item = await select_for_today(
            db,
            redis,
            cooldown_days=settings.rotation_cooldown_days,
            fallback_cooldown_days=settings.rotation_fallback_cooldown_days,
        )
    except NoCandidatesError as e:
        logger.error("rotation_pool_empty")
        raise HTTPException(status_code=503, detail="No topics available in pool. Run seed first.") from e

    cache.invalidate(DAILY_TOPIC_CACHE_KEY)
    logger.info("daily_topic_rotated", topic_id=item.id, category=item.category)
    return RotationResponse(rotated=True, date=utc_today(), topic=TopicResponse(**topic_to_dict(item)))


# ── Admin ──


@router.get("/admin/topics", response_model=AdminTopicListResponse, dependencies=[Depends(require_admin)])
async def admin_list_topics(
    enabled_only: bool = Query(False),
    category: str | None = Query(None),
    limit: int = Query(200, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List the topic pool."""
    items = await list_topics(db, enabled_only=enabled_only, category=category, limit=limit, offset=offset)
    total = await count_topics(db, enabled_only=enabled_only)
    return AdminTopicListResponse(
        topics=[AdminTopicResponse(**topic_to_dict(t)) for t in items],
        total=total,
    )


@router.get("/admin/topics/count", response_model=TopicCountResponse, dependencies=[Depends(require_admin)])
async def admin_count_topics(db: AsyncSession = Depends(get_db)):
    """Number of enabled topics."""
    return TopicCountResponse(count=await count_topics(db))


@router.post("/admin/topics", response_model=AdminTopicResponse, status_code=201, dependencies=[Depends(require_admin)])
async def admin_add_topic(body: TopicCreateRequest, db: AsyncSession = Depends(get_db)):
    """Add a topic to the pool."""
    item = await add_topic(
        db,
        topic=body.topic,
        presenter=body.presenter,
        category=body.category,
        weight=body.weight,
        presenter_id=body.presenter_id,
        topic_id=body.id,
    )
    return AdminTopicResponse(**topic_to_dict(item))


@router.post("/admin/topics/seed", response_model=SeedResponse, dependencies=[Depends(require_admin)])
async def admin_seed_topics(db: AsyncSession = Depends(get_db)):
    """Insert the curated starter pool (idempotent)."""
    return SeedResponse(added=await seed_topics(db))


@router.get("/admin/topics/{topic_id}", response_model=AdminTopicResponse, dependencies=[Depends(require_admin)])
async def admin_get_topic(topic_id: str, db: AsyncSession = Depends(get_db)):
    item = await get_topic(db, topic_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Topic not found")
    return AdminTopicResponse(**topic_to_dict(item))


@router.patch("/admin/topics/{topic_id}", response_model=AdminTopicResponse, dependencies=[Depends(require_admin)])
async def admin_update_topic(topic_id: str, body: TopicUpdateRequest, db: AsyncSession = Depends(get_db)):
    """Edit topic fields; omitted fields are unchanged."""
    try:
        item = await update_topic(db, topic_id, body.model_dump(exclude_unset=True))
    except TopicNotFoundError as e:
        raise HTTPException(status_code=404, detail="Topic not found") from e
    return AdminTopicResponse(**topic_to_dict(item))


@router.post("/admin/topics/{topic_id}/disable", response_model=AdminTopicResponse, dependencies=[Depends(require_admin)])
async def admin_disable_topic(topic_id: str, db: AsyncSession = Depends(get_db)):
    """Remove a topic from rotation without deleting it."""
    try:
        item = await disable_topic(db, topic_id)
    except TopicNotFoundError as e:
        raise HTTPException(status_code=404, detail="Topic not found") from e
    return AdminTopicResponse(**topic_to_dict(item))


@router.delete("/admin/topics/{topic_id}", status_code=204, dependencies=[Depends(require_admin)])
async def admin_delete_topic(topic_id: str, db: AsyncSession = Depends(get_db)) -> None:
    """Delete a never-shown topic. Shown topics must be disabled instead."""
    try:
        await delete_topic(db, topic_id)
    except TopicNotFoundError as e:
        raise HTTPException(status_code=404, detail="Topic not found") from e
    except TopicInUseError as e:
        raise HTTPException(status_code=409, detail="Topic has been shown; disable it instead") from e
