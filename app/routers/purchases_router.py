# app/routers/purchases_router.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.purchase_schemas import PurchaseCreate, PurchaseOut
from app.services.purchase_service import create_purchase, get_all_purchases, get_purchase_by_id
from app.utils.check_roles import require_role, ROLE_ADMIN
from app.utils.get_user import get_current_user

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.post("", response_model=PurchaseOut, status_code=status.HTTP_201_CREATED)
@require_role([ROLE_ADMIN])
async def route_create_purchase(
    payload: PurchaseCreate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """
    Record incoming stock. Items with `product_id` restock that product and
    update its cost price; items without one create a new product.
    """
    try:
        return await create_purchase(db, payload, _user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to record purchase")


@router.get("", response_model=List[PurchaseOut])
@require_role([ROLE_ADMIN])
async def route_get_purchases(
    limit: int = 100,
    offset: int = 0,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await get_all_purchases(db, limit=limit, offset=offset)


@router.get("/{purchase_id}", response_model=PurchaseOut)
@require_role([ROLE_ADMIN])
async def route_get_purchase(
    purchase_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    try:
        return await get_purchase_by_id(db, purchase_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
