"""Shared FastAPI dependencies."""

from dbai.database import get_optional_session as _get_optional_session
from dbai.database import get_session as _get_session
from dbai.redis_client import get_optional_redis

get_db = _get_session
get_optional_db = _get_optional_session


def get_redis_dep() -> object | None:
    """Return the Redis client for event publishing, or None if unavailable."""
    return get_optional_redis()
