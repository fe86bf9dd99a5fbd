# app/utils/get_user.py
from fastapi import Depends, HTTPException, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user_models import User
from app.core.db import get_db
from app.core.security import decode_token


async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing access token")
    raw_token = authorization.split("Bearer ", 1)[1].strip()

    try:
        payload = decode_token(raw_token)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))

    user = await db.get(User, payload["user_id"])
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if user.token_version != payload["token_version"]:
        raise HTTPException(status_code=401, detail="Token invalidated. Please log in again.")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is inactive.")

    request.state.user = user
    # plain copy for the request logger, which runs after the session is closed
    request.state.username = user.username
    return user
