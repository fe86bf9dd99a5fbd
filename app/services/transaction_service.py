# app/services/transaction_service.py
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    CheckoutError,
    EmptyCartError,
    InvalidQuantityError,
    TransactionNotFoundError,
)
from app.models.discount_models import Discount
from app.models.product_models import Product
from app.models.transaction_models import Transaction, TransactionDetail
from app.schemas.transaction_schemas import (
    CheckoutRequest,
    TransactionOut,
    TransactionDetailOut,
    TransactionItemOut,
)
from app.services.inventory_service import (
    aggregate_quantities,
    decrement_stock,
    load_products_for_update,
    validate_stock,
)
from app.services.pricing_service import (
    PricedLine,
    calculate_change,
    price_line,
    resolve_global_discount,
)
from app.utils.activity_helpers import log_user_activity
from app.utils.decimal_utils import ZERO, to_decimal

logger = logging.getLogger(__name__)

DELETED_PRODUCT_LABEL = "Product deleted"


# --------------------------
# Helpers
# --------------------------
def _validate_cart(payload: CheckoutRequest) -> None:
    if not payload.items:
        raise EmptyCartError()
    for item in payload.items:
        if item.quantity is None or item.quantity <= 0:
            raise InvalidQuantityError(item.product_id, item.quantity)


def _summary(txn: Transaction, total_items, cost_total) -> TransactionOut:
    out = TransactionOut.model_validate(txn, from_attributes=True)
    return out.model_copy(update={
        "total_items": int(total_items or 0),
        "profit": to_decimal(to_decimal(txn.total_amount) - to_decimal(cost_total)),
    })


def _summary_query():
    """Headers with item count and cost of goods aggregated from their lines."""
    total_items = func.coalesce(func.sum(TransactionDetail.quantity), 0).label("total_items")
    cost_total = func.coalesce(
        func.sum(TransactionDetail.cost_price * TransactionDetail.quantity), 0
    ).label("cost_total")
    return (
        select(Transaction, total_items, cost_total)
        .outerjoin(TransactionDetail, TransactionDetail.transaction_id == Transaction.id)
        .group_by(Transaction.id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
    )


async def _find_by_request_id(db: AsyncSession, request_id: str) -> Optional[TransactionOut]:
    result = await db.execute(_summary_query().where(Transaction.request_id == request_id))
    row = result.first()
    if row is None:
        return None
    return _summary(*row)


async def _load_item_discounts(db: AsyncSession, products: Iterable[Product], now: datetime) -> List[Discount]:
    """
    All active product- or category-scoped discounts that could touch the
    cart, in a single query.
    """
    products = list(products)
    product_ids = [p.id for p in products]
    category_ids = sorted({p.category_id for p in products if p.category_id is not None})

    scope = [Discount.product_id.in_(product_ids)]
    if category_ids:
        scope.append(Discount.category_id.in_(category_ids))

    result = await db.execute(
        select(Discount).where(
            Discount.is_active.is_(True),
            Discount.start_date <= now,
            Discount.end_date >= now,
            or_(*scope),
        )
    )
    return list(result.scalars().all())


def _build_detail(line: PricedLine, product: Product) -> TransactionDetail:
    # Unknown cost is booked at the sell price, i.e. zero profit for the line.
    cost = product.cost_price if product.cost_price is not None else product.price
    return TransactionDetail(
        product_id=line.product_id,
        quantity=line.quantity,
        price=line.unit_price,
        subtotal=line.subtotal,
        cost_price=to_decimal(cost),
        discount_id=line.discount_id,
        discount_type=line.discount_type,
        discount_value=line.discount_value,
        discount_amount=line.discount_amount,
    )


# --------------------------
# CHECKOUT
# --------------------------
async def checkout(
    db: AsyncSession,
    payload: CheckoutRequest,
    current_user=None,
    now: Optional[datetime] = None,
) -> TransactionOut:
    """
    Settle a cart into a committed transaction.

    Stock, header, line items and the audit row are written in one database
    transaction; any error rolls all of them back. Business rule failures
    raise a CheckoutError subclass, storage failures propagate as
    SQLAlchemyError after being logged.
    """
    _validate_cart(payload)
    now = now or datetime.now(timezone.utc)

    step = "checking request_id"
    try:
        if payload.request_id:
            existing = await _find_by_request_id(db, payload.request_id)
            if existing is not None:
                logger.info("Checkout replay: request_id=%s already settled as transaction #%s",
                            payload.request_id, existing.id)
                return existing

        step = "loading products"
        requested = aggregate_quantities(payload.items)
        products: Dict[int, Product] = await load_products_for_update(db, requested.keys())
        validate_stock(requested, products)

        step = "loading item discounts"
        discounts = await _load_item_discounts(db, products.values(), now)

        lines = [
            price_line(
                product_id=item.product_id,
                category_id=products[item.product_id].category_id,
                unit_price=products[item.product_id].price,
                quantity=item.quantity,
                discounts=discounts,
                now=now,
            )
            for item in payload.items
        ]
        order_total = to_decimal(sum((line.subtotal for line in lines), ZERO))
        item_discount_total = to_decimal(sum((line.discount_amount for line in lines), ZERO))

        global_discount_amount = ZERO
        if payload.discount_id is not None:
            step = "loading global discount"
            discount = await db.get(Discount, payload.discount_id)
            global_discount_amount = resolve_global_discount(payload.discount_id, discount, order_total, now)

        total_amount = max(ZERO, order_total - global_discount_amount)
        change_amount = calculate_change(payload.payment_amount, total_amount)

        step = "decrementing stock"
        await decrement_stock(db, requested)

        step = "inserting transaction"
        txn = Transaction(
            total_amount=total_amount,
            discount_id=payload.discount_id,
            discount_amount=to_decimal(item_discount_total + global_discount_amount),
            payment_amount=to_decimal(payload.payment_amount) if payload.payment_amount is not None else None,
            change_amount=change_amount,
            created_by=current_user.id if current_user is not None else None,
            request_id=payload.request_id,
        )
        db.add(txn)
        await db.flush()

        step = "inserting transaction details"
        details = [_build_detail(line, products[line.product_id]) for line in lines]
        for detail in details:
            detail.transaction_id = txn.id
        db.add_all(details)
        await db.flush()

        log_user_activity(
            db, current_user,
            f"Checkout #{txn.id}: {len(details)} line(s), total {total_amount}",
        )

        step = "committing"
        await db.commit()
    except CheckoutError as e:
        await db.rollback()
        logger.info("Checkout rejected: %s", e)
        raise
    except IntegrityError:
        await db.rollback()
        if payload.request_id:
            # A concurrent request with the same key won the insert.
            existing = await _find_by_request_id(db, payload.request_id)
            if existing is not None:
                return existing
        logger.exception("Checkout failed while %s", step)
        raise
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Checkout failed while %s", step)
        raise

    await db.refresh(txn)
    cost_total = sum((d.cost_price * d.quantity for d in details), ZERO)
    total_items = sum(d.quantity for d in details)
    logger.info("Checkout #%s settled: total=%s discount=%s items=%s",
                txn.id, txn.total_amount, txn.discount_amount, total_items)
    return _summary(txn, total_items, cost_total)


# --------------------------
# READ
# --------------------------
async def get_all_transactions(db: AsyncSession) -> List[TransactionOut]:
    result = await db.execute(_summary_query())
    return [_summary(*row) for row in result.all()]


async def get_transactions_by_date_range(db: AsyncSession, start: datetime, end: datetime) -> List[TransactionOut]:
    """Both bounds inclusive; pass UTC instants (see timezone_utils.day_range)."""
    result = await db.execute(
        _summary_query().where(Transaction.created_at >= start, Transaction.created_at <= end)
    )
    return [_summary(*row) for row in result.all()]


async def get_transaction_by_id(db: AsyncSession, transaction_id: int) -> TransactionDetailOut:
    result = await db.execute(_summary_query().where(Transaction.id == transaction_id))
    row = result.first()
    if row is None:
        raise TransactionNotFoundError(transaction_id)
    summary = _summary(*row)

    rows = await db.execute(
        select(TransactionDetail, Product.name)
        .outerjoin(Product, Product.id == TransactionDetail.product_id)
        .where(TransactionDetail.transaction_id == transaction_id)
        .order_by(TransactionDetail.id)
    )
    items = []
    gross_amount = ZERO
    for detail, product_name in rows.all():
        gross_amount += to_decimal(detail.price) * detail.quantity
        items.append(TransactionItemOut(
            id=detail.id,
            product_id=detail.product_id,
            product_name=product_name or DELETED_PRODUCT_LABEL,
            quantity=detail.quantity,
            price=to_decimal(detail.price),
            subtotal=to_decimal(detail.subtotal),
            cost_price=to_decimal(detail.cost_price),
            discount_id=detail.discount_id,
            discount_type=detail.discount_type,
            discount_value=to_decimal(detail.discount_value) if detail.discount_value is not None else None,
            discount_amount=to_decimal(detail.discount_amount),
        ))

    return TransactionDetailOut(
        **summary.model_dump(),
        gross_amount=to_decimal(gross_amount),
        items=items,
    )
