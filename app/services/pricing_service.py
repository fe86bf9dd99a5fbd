# app/services/pricing_service.py
"""
Discount resolution and line pricing.

Everything here is a pure function of its arguments: discounts are passed in
already loaded, and the current instant is passed explicitly. The checkout
service is the only caller that touches the database.
"""
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel

from app.core.exceptions import (
    DiscountExpiredError,
    DiscountNotEligibleError,
    DiscountNotFoundError,
    MinimumOrderNotMetError,
)
from app.models.discount_models import Discount, DiscountType
from app.utils.decimal_utils import ZERO, to_decimal
from app.utils.timezone_utils import as_utc


class PricedLine(BaseModel):
    """Result of pricing one cart line."""

    product_id: int
    quantity: int
    unit_price: Decimal
    unit_discount: Decimal = ZERO
    discount_id: Optional[int] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = None

    @property
    def gross(self) -> Decimal:
        return to_decimal(self.unit_price * self.quantity)

    @property
    def discount_amount(self) -> Decimal:
        return to_decimal(self.unit_discount * self.quantity)

    @property
    def subtotal(self) -> Decimal:
        return to_decimal((self.unit_price - self.unit_discount) * self.quantity)


def is_discount_active(discount: Discount, now: datetime) -> bool:
    if not discount.is_active:
        return False
    now = as_utc(now)
    return as_utc(discount.start_date) <= now <= as_utc(discount.end_date)


def calculate_discount_amount(discount_type: DiscountType, value, amount) -> Decimal:
    """
    Discount taken off `amount`, never more than `amount` itself.
    """
    amount = to_decimal(amount)
    if amount <= ZERO:
        return ZERO
    value = to_decimal(value)
    if discount_type == DiscountType.PERCENTAGE:
        discount = to_decimal(amount * value / Decimal("100"))
    else:
        discount = value
    return max(ZERO, min(discount, amount))


def _best_candidate(candidates: list) -> Optional[Discount]:
    # Highest value wins; equal values fall back to the oldest discount.
    if not candidates:
        return None
    return min(candidates, key=lambda d: (-to_decimal(d.value), d.id or 0))


def select_item_discount(
    product_id: int,
    category_id: Optional[int],
    discounts: Iterable[Discount],
    now: datetime,
) -> Optional[Discount]:
    """
    Pick the automatic discount for one product.

    A discount scoped to the product beats one scoped to its category. Within
    the same scope the discount with the highest `value` is taken, regardless
    of whether it is a percentage or a flat amount.
    """
    by_product, by_category = [], []
    for discount in discounts:
        if not is_discount_active(discount, now):
            continue
        if discount.product_id is not None and discount.product_id == product_id:
            by_product.append(discount)
        elif (
            discount.product_id is None
            and category_id is not None
            and discount.category_id == category_id
        ):
            by_category.append(discount)

    return _best_candidate(by_product) or _best_candidate(by_category)


def price_line(
    product_id: int,
    category_id: Optional[int],
    unit_price,
    quantity: int,
    discounts: Iterable[Discount],
    now: datetime,
) -> PricedLine:
    unit_price = to_decimal(unit_price)
    discount = select_item_discount(product_id, category_id, discounts, now)
    if discount is None:
        return PricedLine(product_id=product_id, quantity=quantity, unit_price=unit_price)

    return PricedLine(
        product_id=product_id,
        quantity=quantity,
        unit_price=unit_price,
        unit_discount=calculate_discount_amount(discount.discount_type, discount.value, unit_price),
        discount_id=discount.id,
        discount_type=discount.discount_type,
        discount_value=to_decimal(discount.value),
    )


def resolve_global_discount(
    discount_id: int,
    discount: Optional[Discount],
    order_total,
    now: datetime,
) -> Decimal:
    """
    Validate a cashier-selected discount and return its amount against
    `order_total` (the total after item discounts).
    """
    if discount is None:
        raise DiscountNotFoundError(discount_id)
    if not discount.is_global:
        raise DiscountNotEligibleError(
            discount_id, "it is a product or category discount and is applied automatically"
        )
    if not is_discount_active(discount, now):
        raise DiscountExpiredError(discount_id)

    order_total = to_decimal(order_total)
    min_order = to_decimal(discount.min_order_amount)
    if order_total < min_order:
        raise MinimumOrderNotMetError(discount_id, min_order, order_total)

    return calculate_discount_amount(discount.discount_type, discount.value, order_total)


def calculate_change(payment_amount, total_amount) -> Decimal:
    """Change owed; underpayment is accepted and yields zero."""
    if payment_amount is None:
        return ZERO
    return max(ZERO, to_decimal(payment_amount) - to_decimal(total_amount))
