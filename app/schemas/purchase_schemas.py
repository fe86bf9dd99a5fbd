# app/schemas/purchase_schemas.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.schemas.transaction_schemas import Money, NonNegativeDecimal


class PurchaseItemCreate(BaseModel):
    product_id: Optional[int] = None      # None = new product
    product_name: Optional[str] = None    # required for new products
    quantity: int = Field(..., gt=0)
    buy_price: NonNegativeDecimal
    sell_price: Optional[NonNegativeDecimal] = None  # required for new products
    category_id: Optional[int] = None


class PurchaseCreate(BaseModel):
    supplier_name: Optional[str] = None
    notes: Optional[str] = None
    items: List[PurchaseItemCreate] = Field(..., min_length=1)


class PurchaseItemOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    buy_price: Money
    sell_price: Optional[Money] = None
    category_id: Optional[int] = None
    subtotal: Money

    class Config:
        from_attributes = True


class PurchaseOut(BaseModel):
    id: int
    supplier_name: Optional[str] = None
    total_amount: Money
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    items: List[PurchaseItemOut] = Field(default_factory=list)

    class Config:
        from_attributes = True
