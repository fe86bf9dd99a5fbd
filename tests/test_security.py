from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from app.core.config import JWT_ALGORITHM, JWT_SECRET
from app.core.security import (
    create_access_token,
    decode_token,
    hash_password,
    token_lifetime,
    verify_password,
)


def make_user(role="cashier"):
    return SimpleNamespace(id=7, username="kasir", role=role, token_version=3)


def test_password_hash_round_trip():
    hashed = hash_password("rahasia")
    assert hashed != "rahasia"
    assert verify_password("rahasia", hashed)
    assert not verify_password("salah", hashed)


def test_token_carries_identity_and_version():
    payload = decode_token(create_access_token(make_user()))
    assert (payload["user_id"], payload["sub"], payload["role"], payload["token_version"]) == (7, "kasir", "cashier", 3)
    assert payload["type"] == "access"


def test_admin_tokens_are_shorter_lived():
    assert token_lifetime("admin") < token_lifetime("cashier")


def test_expired_token_rejected():
    token = create_access_token(make_user(), expires_delta=timedelta(seconds=-5))
    with pytest.raises(ValueError):
        decode_token(token)


def test_token_without_required_claims_rejected():
    token = jwt.encode({"sub": "kasir", "type": "access"}, JWT_SECRET, algorithm=JWT_ALGORITHM)
    with pytest.raises(ValueError, match="payload"):
        decode_token(token)


def test_token_signed_with_other_secret_rejected():
    token = jwt.encode({"sub": "kasir"}, "another-secret", algorithm=JWT_ALGORITHM)
    with pytest.raises(ValueError):
        decode_token(token)
