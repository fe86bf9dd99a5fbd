# app/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import (
    JWT_SECRET,
    JWT_ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES,
)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

REQUIRED_CLAIMS = ("sub", "user_id", "role", "token_version")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def token_lifetime(role: str) -> timedelta:
    """Admins get short-lived tokens, cashiers one per shift."""
    if (role or "").lower() == "admin":
        return timedelta(minutes=ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES)
    return timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign an access token for `user`. The embedded token_version must still
    match the user row when the token is presented.
    """
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user.username,
        "user_id": user.id,
        "role": user.role,
        "token_version": user.token_version,
        "type": "access",
        "iat": now,
        "exp": now + (expires_delta or token_lifetime(user.role)),
    }
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise ValueError("Invalid or expired token")

    if payload.get("type") != "access" or any(payload.get(c) is None for c in REQUIRED_CLAIMS):
        raise ValueError("Invalid token payload")
    return payload
