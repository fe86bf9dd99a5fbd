# app/services/auth_service.py
import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, verify_password
from app.models.user_models import User

logger = logging.getLogger(__name__)


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalars().first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login for username=%r", username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive.")
    return user


async def create_token(db: AsyncSession, user: User) -> str:
    """Issue an access token and stamp the login time."""
    access_token = create_access_token(user)
    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    logger.info("User %s (%s) logged in", user.username, user.role)
    return access_token


async def logout_user(db: AsyncSession, user: User) -> None:
    """Invalidate every outstanding token of `user`."""
    user.token_version = (user.token_version or 0) + 1
    await db.commit()
    logger.info("Tokens revoked for user %s", user.username)
