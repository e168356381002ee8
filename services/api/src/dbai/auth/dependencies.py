"""FastAPI authentication dependencies."""

from __future__ import annotations

import hmac

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dbai.auth.jwt import verify_token
from dbai.config import get_settings

_bearer = HTTPBearer()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
) -> str:
    """Verify the bearer JWT and return its subject. Raises 401 on failure."""
    try:
        payload = verify_token(credentials.credentials)
    except (jwt.InvalidTokenError, OSError) as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    return str(payload["sub"])


async def require_admin(user_id: str = Depends(get_current_user_id)) -> str:
    """Allow only user ids listed in DBAI_ADMIN_USER_IDS."""
    if user_id not in get_settings().admin_user_ids:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user_id


def _check_secret(credentials: HTTPAuthorizationCredentials, secret: str) -> None:
    if not secret or not hmac.compare_digest(credentials.credentials, secret):
        raise HTTPException(status_code=401, detail="Unauthorized")


async def require_cron_secret(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
) -> None:
    """Scheduler calls carry ``Authorization: Bearer <cron_secret>``."""
    _check_secret(credentials, get_settings().cron_secret)


async def require_internal_secret(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
) -> None:
    """Service-to-service calls carry ``Authorization: Bearer <internal_api_secret>``."""
    _check_secret(credentials, get_settings().internal_api_secret)
