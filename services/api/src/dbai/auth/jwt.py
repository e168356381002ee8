"""
Bearer token verification.

Tokens are issued by the external auth provider and signed with its
private key; this service only holds the public key. The ``sub`` claim is
the stable user id.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jwt

from dbai.config import get_settings

_public_key: str | None = None


def _load_public_key() -> str:
    """Load the verification key from disk (cached after first call)."""
    global _public_key  # noqa: PLW0603
    if _public_key is None:
        _public_key = Path(get_settings().jwt_public_key_path).read_text()
    return _public_key


def reset_keys() -> None:
    """Reset the cached key (useful for testing)."""
    global _public_key  # noqa: PLW0603
    _public_key = None


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Args:
        token: The encoded JWT string.

    Returns:
        Decoded payload dictionary.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or has no subject.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            _load_public_key(),
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if not payload.get("sub"):
        msg = "Token has no subject"
        raise jwt.InvalidTokenError(msg)

    return payload
