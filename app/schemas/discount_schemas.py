from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from app.models.discount_models import DiscountType
from app.schemas.transaction_schemas import Money


class DiscountOut(BaseModel):
    id: int
    name: str
    discount_type: DiscountType
    value: Money
    min_order_amount: Money
    product_id: Optional[int] = None
    category_id: Optional[int] = None
    start_date: datetime
    end_date: datetime
    is_active: bool

    class Config:
        from_attributes = True
