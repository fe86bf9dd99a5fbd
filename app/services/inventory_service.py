# app/services/inventory_service.py
from typing import Dict, Iterable

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InsufficientStockError, ProductNotFoundError
from app.models.product_models import Product


def aggregate_quantities(items: Iterable) -> Dict[int, int]:
    """Sum requested quantities per product id, keeping cart order."""
    requested: Dict[int, int] = {}
    for item in items:
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity
    return requested


async def load_products_for_update(db: AsyncSession, product_ids: Iterable[int]) -> Dict[int, Product]:
    """
    Fetch every product of the cart in one query and lock the rows
    (FOR UPDATE is skipped by SQLite, which serialises writers instead).
    """
    ids = sorted(set(product_ids))
    if not ids:
        return {}
    result = await db.execute(
        select(Product)
        .where(Product.id.in_(ids))
        .order_by(Product.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {p.id: p for p in result.scalars().all()}


def validate_stock(requested: Dict[int, int], products: Dict[int, Product]) -> None:
    """
    Check the whole cart before anything is written. Raises on the first
    unknown product or short item, in cart order.
    """
    for product_id, quantity in requested.items():
        product = products.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if product.stock < quantity:
            raise InsufficientStockError(product_id, quantity, product.stock)


async def decrement_stock(db: AsyncSession, requested: Dict[int, int]) -> None:
    """
    Take `requested` units off every product in a single conditional UPDATE.

    The `stock >= qty` guard is evaluated by the database at write time, so a
    concurrent checkout that drained a product in the meantime leaves that
    row out of the RETURNING set instead of pushing its stock below zero.
    """
    if not requested:
        return

    qty = case(requested, value=Product.id)
    result = await db.execute(
        update(Product)
        .where(Product.id.in_(list(requested)), Product.stock >= qty)
        .values(stock=Product.stock - qty)
        .returning(Product.id)
        .execution_options(synchronize_session=False)
    )
    updated = set(result.scalars().all())
    missing = [pid for pid in requested if pid not in updated]
    if not missing:
        return

    # Name the product that lost the race so the caller gets a useful message.
    product_id = missing[0]
    available = await db.scalar(select(Product.stock).where(Product.id == product_id))
    if available is None:
        raise ProductNotFoundError(product_id)
    raise InsufficientStockError(product_id, requested[product_id], available)
