# app/routers/transactions_router.py
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.transaction_schemas import CheckoutRequest, TransactionOut, TransactionDetailResponse
from app.services.transaction_service import (
    checkout,
    get_all_transactions,
    get_transactions_by_date_range,
    get_transaction_by_id,
)
from app.utils.get_user import get_current_user
from app.utils.timezone_utils import day_range

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Transactions"])


# POST /api/checkout
@router.post("/checkout", response_model=TransactionOut, status_code=status.HTTP_201_CREATED)
async def route_checkout(
    payload: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    """
    Settle a cart. Product and category discounts are applied automatically;
    `discount_id` may only name a global discount.
    """
    try:
        return await checkout(db, payload, current_user=user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to complete checkout")


# GET /api/transactions
@router.get("/transactions", response_model=List[TransactionOut])
async def route_get_transactions(
    start_date: Optional[date] = Query(None, description="YYYY-MM-DD, inclusive"),
    end_date: Optional[date] = Query(None, description="YYYY-MM-DD, inclusive"),
    timezone: Optional[str] = Query(None, description="IANA name, e.g. Asia/Makassar"),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """
    Transaction history, newest first. Both dates are needed to filter;
    `timezone` only decides where each day starts and ends.
    """
    if start_date and end_date:
        if start_date > end_date:
            raise HTTPException(status_code=400, detail="start_date must not be after end_date")
        start, end = day_range(start_date, end_date, timezone)
        return await get_transactions_by_date_range(db, start, end)
    return await get_all_transactions(db)


# GET /api/transactions/{transaction_id}
@router.get("/transactions/{transaction_id}", response_model=TransactionDetailResponse)
async def route_get_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    try:
        return {"data": await get_transaction_by_id(db, transaction_id)}
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
