"""Bearer token verification against the auth provider's public key."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from dbai.auth.jwt import reset_keys, verify_token
from dbai.config import get_settings


@pytest.fixture(scope="module")
def private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def public_key_file(private_key, tmp_path, monkeypatch):
    path = tmp_path / "jwt_public.pem"
    path.write_bytes(
        private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    monkeypatch.setenv("DBAI_JWT_PUBLIC_KEY_PATH", str(path))
    get_settings.cache_clear()
    reset_keys()
    yield path
    reset_keys()


def _token(private_key, **overrides) -> str:
    now = datetime.now(timezone.utc)
    claims = {"sub": "user-42", "iss": "debateai.com", "iat": now, "exp": now + timedelta(minutes=5)}
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, private_key, algorithm="RS256")


class TestVerifyToken:

    def test_valid_token(self, private_key, public_key_file):
        assert verify_token(_token(private_key))["sub"] == "user-42"

    def test_expired_token(self, private_key, public_key_file):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            verify_token(_token(private_key, iat=past - timedelta(minutes=5), exp=past))

    def test_wrong_issuer(self, private_key, public_key_file):
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(_token(private_key, iss="someone-else"))

    def test_missing_subject(self, private_key, public_key_file):
        with pytest.raises(jwt.InvalidTokenError, match="subject"):
            verify_token(_token(private_key, sub=None))

    def test_foreign_signature(self, public_key_file):
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(_token(other))

    def test_missing_key_file(self, private_key, tmp_path, monkeypatch):
        monkeypatch.setenv("DBAI_JWT_PUBLIC_KEY_PATH", str(tmp_path / "absent.pem"))
        get_settings.cache_clear()
        reset_keys()
        with pytest.raises(OSError):
            verify_token(_token(private_key))
