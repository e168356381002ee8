"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dbai.config import get_settings
from dbai.database import close_db, get_session, init_db
from dbai.engagement.router import router as engagement_router
from dbai.health.router import router as health_router
from dbai.middleware import setup_middleware
from dbai.redis_client import close_redis, init_redis
from dbai.topics.pool_service import count_topics
from dbai.topics.router import router as topics_router
from dbai.topics.seed import seed_topics

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    # Seed the rotation pool on first boot so the daily topic is never empty
    try:
        async for db in get_session():
            if await count_topics(db, enabled_only=False) == 0:
                await seed_topics(db)
            break
    except Exception:
        logger.warning("Topic seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="DebateAI Engagement API",
        description="Daily topic rotation, streaks, points, and leaderboards for DebateAI",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(topics_router)
    app.include_router(engagement_router)

    return app


app = create_app()
