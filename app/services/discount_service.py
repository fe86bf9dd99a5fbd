from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.discount_models import Discount


# -----------------------
# READ
# -----------------------
async def get_active_global_discounts(db: AsyncSession, now: Optional[datetime] = None) -> List[Discount]:
    """
    Discounts a cashier may pick at checkout: active, inside their window and
    not tied to a product or category (those are applied automatically).
    Cheapest minimum order first.
    """
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        select(Discount)
        .where(
            Discount.is_active.is_(True),
            Discount.product_id.is_(None),
            Discount.category_id.is_(None),
            Discount.start_date <= now,
            Discount.end_date >= now,
        )
        .order_by(Discount.min_order_amount.asc(), Discount.id.asc())
    )
    return list(result.scalars().all())
