"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.config import get_settings
from dbai.dependencies import get_optional_db
from dbai.redis_client import get_optional_redis
from dbai.topics.pool_service import count_topics

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession | None = Depends(get_optional_db),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe.

    The database is required. Redis only carries events and rate limits,
    so its absence is reported without failing readiness. An empty topic
    pool is reported so operators notice before the daily rotation does.
    """
    checks: dict[str, object] = {}

    if db is None:
        checks["database"] = "error: not configured"
    else:
        try:
            enabled = await count_topics(db)
            checks["database"] = "ok"
            checks["topic_pool"] = "ok" if enabled > 0 else "empty"
        except Exception as exc:
            checks["database"] = f"error: {exc}"

    redis = get_optional_redis()
    if redis is None:
        checks["redis"] = "disabled"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"

    ready = checks["database"] == "ok"
    return {"status": "ready" if ready else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
