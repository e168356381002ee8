"""Curated starter pool for the daily topic rotation."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.db.models import TopicItem

logger = logging.getLogger(__name__)

TOPIC_SEED_DATA: list[dict] = [
    {"id": "seed-musk-twitter", "topic": "Did Elon ruin Twitter/X?", "presenter": "Elon Musk", "category": "tech", "weight": 1.0},
    {"id": "seed-thunberg-fossil-fuels", "topic": "Should we ban fossil fuels by 2030?", "presenter": "Greta Thunberg", "category": "climate", "weight": 1.0},
    {"id": "seed-peterson-masculinity", "topic": "Is traditional masculinity toxic?", "presenter": "Jordan Peterson", "category": "culture", "weight": 1.0},
    {"id": "seed-aoc-billionaire-tax", "topic": "Should billionaires be abolished through taxation?", "presenter": "Alexandria Ocasio-Cortez", "category": "economics", "weight": 1.0},
    {"id": "seed-rogan-psychedelics", "topic": "Should psychedelic drugs be legalized for therapeutic use?", "presenter": "Joe Rogan", "category": "health", "weight": 1.0},
    {"id": "seed-shapiro-free-college", "topic": "Should college be free for everyone?", "presenter": "Ben Shapiro", "category": "education", "weight": 1.0},
    {"id": "seed-carlson-media", "topic": "Is mainstream media trustworthy?", "presenter": "Tucker Carlson", "category": "media", "weight": 1.0},
    {"id": "seed-harris-free-will", "topic": "Is free will an illusion?", "presenter": "Sam Harris", "category": "philosophy", "weight": 1.5},
    {"id": "seed-gates-ai-regulation", "topic": "Should AI development be heavily regulated?", "presenter": "Bill Gates", "category": "tech", "weight": 1.5},
    {"id": "seed-buffett-crypto", "topic": "Is cryptocurrency a legitimate investment?", "presenter": "Warren Buffett", "category": "economics", "weight": 1.0},
    {"id": "seed-warren-big-tech", "topic": "Should we break up Big Tech companies?", "presenter": "Elizabeth Warren", "category": "tech", "weight": 1.0},
    {"id": "seed-maher-cancel-culture", "topic": "Is cancel culture destroying free speech?", "presenter": "Bill Maher", "category": "culture", "weight": 1.0},
    {"id": "seed-zuckerberg-metaverse", "topic": "Is the metaverse the future of social interaction?", "presenter": "Mark Zuckerberg", "category": "tech", "weight": 0.5},
]

# Served when the store is unavailable or the pool is empty. Never recorded.
FALLBACK_TOPIC: dict = {
    "id": None,
    "topic": "Should AI development be heavily regulated?",
    "presenter": "Bill Gates",
    "presenter_id": None,
    "category": "tech",
}


async def seed_topics(db: AsyncSession) -> int:
    """Insert seed topics that are not present yet. Existing rows are left as edited."""
    result = await db.execute(select(TopicItem.id).where(TopicItem.id.in_([t["id"] for t in TOPIC_SEED_DATA])))
    existing = set(result.scalars())

    added = 0
    for data in TOPIC_SEED_DATA:
        if data["id"] in existing:
            continue
        db.add(TopicItem(**data, enabled=True))
        added += 1

    await db.commit()
    logger.info("Seeded %d topics (%d already present)", added, len(existing))
    return added
