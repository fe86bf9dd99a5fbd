# app/routers/auth_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.user_schemas import UserLogin, TokenResponse, UserOut
from app.services.auth_service import authenticate_user, create_token, logout_user
from app.utils.get_user import get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, data.username, data.password)
    access_token = await create_token(db, user)
    return TokenResponse(access_token=access_token, role=user.role)


@router.post("/logout")
async def logout(db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    """Every token issued to the caller so far stops working."""
    await logout_user(db, current_user)
    return {"msg": "Logged out"}


@router.get("/me", response_model=UserOut)
async def me(current_user=Depends(get_current_user)):
    return current_user
