from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.discount_schemas import DiscountOut
from app.services.discount_service import get_active_global_discounts
from app.utils.get_user import get_current_user

router = APIRouter(prefix="/discounts", tags=["Discounts"])


@router.get("/active", response_model=List[DiscountOut])
async def route_get_active_discounts(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """Global discounts the cashier can choose at checkout."""
    return await get_active_global_discounts(db)
