"""Topic pool CRUD for the admin console."""

from __future__ import annotations

import logging
import math
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.db.models import RotationRecord, TopicItem
from dbai.errors import TopicInUseError, TopicNotFoundError, TopicValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("topic", "presenter", "presenter_id", "category", "weight", "enabled")
_REQUIRED_TEXT = ("topic", "presenter", "category")


def validate_topic_fields(fields: dict[str, Any]) -> None:
    """Reject empty text and non-positive weights, naming the field."""
    for name in _REQUIRED_TEXT:
        if name in fields and not (fields[name] or "").strip():
            raise TopicValidationError(name, "must not be empty")
    if "weight" in fields:
        weight = fields["weight"]
        if weight is None or not math.isfinite(weight) or weight <= 0:
            raise TopicValidationError("weight", "must be a positive number")


async def list_topics(
    db: AsyncSession,
    *,
    enabled_only: bool = False,
    category: str | None = None,
    limit: int = 200,
    offset: int = 0,
) -> list[TopicItem]:
    stmt = select(TopicItem)
    if enabled_only:
        stmt = stmt.where(TopicItem.enabled.is_(True))
    if category:
        stmt = stmt.where(TopicItem.category == category)
    stmt = stmt.order_by(TopicItem.category, TopicItem.topic).limit(limit).offset(offset)
    result = await db.execute(stmt)
    return list(result.scalars())


async def get_enabled_pool(db: AsyncSession) -> list[TopicItem]:
    """Every enabled topic, unpaginated. This is the rotation candidate pool."""
    result = await db.execute(
        select(TopicItem).where(TopicItem.enabled.is_(True)).order_by(TopicItem.id)
    )
    return list(result.scalars())


async def get_topic(db: AsyncSession, topic_id: str) -> TopicItem | None:
    result = await db.execute(select(TopicItem).where(TopicItem.id == topic_id))
    return result.scalar_one_or_none()


async def count_topics(db: AsyncSession, *, enabled_only: bool = True) -> int:
    stmt = select(func.count()).select_from(TopicItem)
    if enabled_only:
        stmt = stmt.where(TopicItem.enabled.is_(True))
    return (await db.execute(stmt)).scalar_one()


async def add_topic(
    db: AsyncSession,
    topic: str,
    presenter: str,
    category: str = "general",
    weight: float = 1.0,
    presenter_id: str | None = None,
    topic_id: str | None = None,
) -> TopicItem:
    """Insert an enabled topic. Raises TopicValidationError on bad input."""
    validate_topic_fields({"topic": topic, "presenter": presenter, "category": category, "weight": weight})
    item = TopicItem(
        topic=topic.strip(),
        presenter=presenter.strip(),
        presenter_id=presenter_id,
        category=category.strip(),
        weight=float(weight),
        enabled=True,
    )
    if topic_id:
        if await get_topic(db, topic_id) is not None:
            raise TopicValidationError("id", "already exists")
        item.id = topic_id
    db.add(item)
    try:
        await db.commit()
    except IntegrityError:
        # Concurrent insert of the same id
        await db.rollback()
        logger.warning("Topic id %s already exists", topic_id)
        raise TopicValidationError("id", "already exists") from None
    logger.info("Added topic %s [%s] weight=%.2f", item.id, item.category, item.weight)
    return item


async def update_topic(db: AsyncSession, topic_id: str, patch: dict[str, Any]) -> TopicItem:
    """Apply a partial update. Unknown keys are ignored, None values skipped."""
    changes = {k: v for k, v in patch.items() if k in EDITABLE_FIELDS and v is not None}
    validate_topic_fields(changes)

    item = await get_topic(db, topic_id)
    if item is None:
        raise TopicNotFoundError(topic_id)

    for key, value in changes.items():
        setattr(item, key, value.strip() if isinstance(value, str) else value)
    await db.commit()
    return item


async def disable_topic(db: AsyncSession, topic_id: str) -> TopicItem:
    """Take a topic out of rotation. History rows keep referencing it."""
    return await update_topic(db, topic_id, {"enabled": False})


async def delete_topic(db: AsyncSession, topic_id: str) -> None:
    """Delete a topic that has never been shown. Shown topics can only be disabled."""
    item = await get_topic(db, topic_id)
    if item is None:
        raise TopicNotFoundError(topic_id)

    referenced = await db.execute(
        select(RotationRecord.id).where(RotationRecord.topic_id == topic_id).limit(1)
    )
    if referenced.scalar_one_or_none() is not None:
        raise TopicInUseError(topic_id)

    await db.delete(item)
    await db.commit()
    logger.info("Deleted topic %s", topic_id)


def topic_to_dict(item: TopicItem) -> dict:
    return {
        "id": item.id,
        "topic": item.topic,
        "presenter": item.presenter,
        "presenter_id": item.presenter_id,
        "category": item.category,
        "weight": item.weight,
        "enabled": item.enabled,
    }
