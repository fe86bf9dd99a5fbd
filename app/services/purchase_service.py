# app/services/purchase_service.py
import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PurchaseError, PurchaseNotFoundError
from app.models.category_models import Category
from app.models.product_models import Product
from app.models.purchase_models import Purchase, PurchaseItem
from app.schemas.purchase_schemas import PurchaseCreate, PurchaseItemCreate, PurchaseOut
from app.utils.activity_helpers import log_user_activity
from app.utils.decimal_utils import ZERO, to_decimal

logger = logging.getLogger(__name__)


def _restock(product: Product, item: PurchaseItemCreate) -> None:
    # SQL-side increment so a concurrent checkout's decrement is not lost.
    product.stock = Product.stock + item.quantity
    product.cost_price = to_decimal(item.buy_price)


async def _resolve_product(db: AsyncSession, index: int, item: PurchaseItemCreate, current_user) -> Product:
    """Existing product to restock, or a freshly created one."""
    if item.product_id is not None:
        product = await db.get(Product, item.product_id, with_for_update=True)
        if product is None:
            raise PurchaseError(f"Item #{index}: product with ID {item.product_id} not found")
        _restock(product, item)
        return product

    name = (item.product_name or "").strip()
    if not name:
        raise PurchaseError(f"Item #{index}: product_name is required for a new product")
    if item.sell_price is None or item.sell_price <= 0:
        raise PurchaseError(f"Item #{index}: sell_price must be greater than zero for a new product")

    # A "new" product whose name already exists is treated as a restock.
    result = await db.execute(select(Product).where(Product.name == name).with_for_update())
    product = result.scalars().first()
    if product is not None:
        _restock(product, item)
        return product

    if item.category_id is not None and await db.get(Category, item.category_id) is None:
        raise PurchaseError(f"Item #{index}: category with ID {item.category_id} not found")

    product = Product(
        name=name,
        price=to_decimal(item.sell_price),
        cost_price=to_decimal(item.buy_price),
        stock=item.quantity,
        category_id=item.category_id,
        created_by=current_user.id if current_user is not None else None,
    )
    db.add(product)
    return product


# --------------------------
# CREATE PURCHASE
# --------------------------
async def create_purchase(db: AsyncSession, payload: PurchaseCreate, current_user) -> PurchaseOut:
    """
    Record received stock. Every item restocks or creates its product inside
    one database transaction, so a bad item leaves nothing behind.
    """
    try:
        purchase = Purchase(
            supplier_name=payload.supplier_name,
            notes=payload.notes,
            created_by=current_user.id if current_user is not None else None,
            items=[],
        )
        total_amount = ZERO

        for index, item in enumerate(payload.items, start=1):
            product = await _resolve_product(db, index, item, current_user)
            await db.flush()

            subtotal = to_decimal(to_decimal(item.buy_price) * item.quantity)
            total_amount += subtotal
            purchase.items.append(PurchaseItem(
                product_id=product.id,
                product_name=product.name,
                quantity=item.quantity,
                buy_price=to_decimal(item.buy_price),
                sell_price=to_decimal(item.sell_price) if item.product_id is None and item.sell_price is not None else None,
                category_id=item.category_id if item.product_id is None else None,
                subtotal=subtotal,
            ))
            logger.info("Restock: %s +%d unit(s) at %s (margin %s%%)",
                        product.name, item.quantity, product.cost_price, product.margin)

        purchase.total_amount = to_decimal(total_amount)
        db.add(purchase)
        await db.flush()

        log_user_activity(
            db, current_user,
            f"Purchase #{purchase.id}: {len(payload.items)} item(s), total {purchase.total_amount}",
        )
        await db.commit()
    except PurchaseError:
        await db.rollback()
        raise
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Purchase failed")
        raise

    return await get_purchase_by_id(db, purchase.id)


# --------------------------
# READ
# --------------------------
async def get_all_purchases(db: AsyncSession, limit: int = 100, offset: int = 0) -> List[PurchaseOut]:
    result = await db.execute(
        select(Purchase)
        .order_by(Purchase.created_at.desc(), Purchase.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [PurchaseOut.model_validate(p, from_attributes=True) for p in result.scalars().all()]


async def get_purchase_by_id(db: AsyncSession, purchase_id: int) -> PurchaseOut:
    result = await db.execute(
        select(Purchase)
        .where(Purchase.id == purchase_id)
        .execution_options(populate_existing=True)
    )
    purchase = result.scalars().first()
    if purchase is None:
        raise PurchaseNotFoundError(purchase_id)
    return PurchaseOut.model_validate(purchase, from_attributes=True)
