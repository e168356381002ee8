"""Best-effort event publishing over Redis pub/sub.

Notification and email workers subscribe to these channels. A missing or
failing Redis never fails the write that produced the event.
"""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

STREAK_UPDATE_CHANNEL = "pubsub:streak_update"
TOPIC_ROTATED_CHANNEL = "pubsub:topic_rotated"


async def publish_event(redis: object | None, channel: str, payload: dict[str, Any]) -> bool:
    """Publish payload as JSON. Returns False when skipped or failed."""
    if redis is None:
        return False
    try:
        await redis.publish(channel, json.dumps(payload, default=str))  # type: ignore[union-attr]
    except Exception:
        logger.warning("Failed to publish %s event", channel, exc_info=True)
        return False
    return True


async def emit_streak_update(
    redis: object | None, user_id: str, event: str, current_streak: int, longest_streak: int,
) -> None:
    """Announce streak_started / streak_extended / streak_reset / streak_warning."""
    await publish_event(redis, STREAK_UPDATE_CHANNEL, {
        "user_id": user_id,
        "event": event,
        "current_streak": current_streak,
        "longest_streak": longest_streak,
    })


async def emit_topic_rotated(redis: object | None, topic: dict[str, Any]) -> None:
    await publish_event(redis, TOPIC_ROTATED_CHANNEL, topic)
