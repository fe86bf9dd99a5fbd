# app/schemas/transaction_schemas.py
from pydantic import BaseModel, Field, PlainSerializer
from decimal import Decimal
from typing import Optional, List
from datetime import datetime
from typing_extensions import Annotated

from app.models.discount_models import DiscountType

# -------------------------------------------------------------------------
# Reusable money types (Decimal in Python, plain number in JSON)
# -------------------------------------------------------------------------
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
NonNegativeDecimal = Annotated[Decimal, Field(ge=0, max_digits=14, decimal_places=2)]


# -------------------------------------------------------------------------
# Checkout Schemas
# -------------------------------------------------------------------------
class CheckoutItem(BaseModel):
    product_id: int
    # sign is checked by the checkout service so it can answer 400, not 422
    quantity: int


class CheckoutRequest(BaseModel):
    items: List[CheckoutItem] = Field(default_factory=list)
    discount_id: Optional[int] = None
    payment_amount: Optional[NonNegativeDecimal] = None
    request_id: Optional[str] = Field(default=None, min_length=1, max_length=64)


# -------------------------------------------------------------------------
# Transaction Schemas
# -------------------------------------------------------------------------
class TransactionOut(BaseModel):
    id: int
    total_amount: Money
    discount_id: Optional[int] = None
    discount_amount: Money
    payment_amount: Optional[Money] = None
    change_amount: Money
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    total_items: int = 0
    profit: Money = Decimal("0.00")

    class Config:
        from_attributes = True


class TransactionItemOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    price: Money
    subtotal: Money
    cost_price: Money
    discount_id: Optional[int] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Money] = None
    discount_amount: Money

    class Config:
        from_attributes = True


class TransactionDetailOut(TransactionOut):
    gross_amount: Money
    items: List[TransactionItemOut] = Field(default_factory=list)


class TransactionDetailResponse(BaseModel):
    data: TransactionDetailOut
