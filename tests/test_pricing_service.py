from datetime import timedelta
from decimal import Decimal

import pytest

from app.core.exceptions import (
    DiscountExpiredError,
    DiscountNotEligibleError,
    DiscountNotFoundError,
    MinimumOrderNotMetError,
)
from app.models.discount_models import Discount, DiscountType
from app.services.pricing_service import (
    calculate_change,
    calculate_discount_amount,
    is_discount_active,
    price_line,
    resolve_global_discount,
    select_item_discount,
)
from tests.conftest import NOW


def make_discount(id, value, discount_type=DiscountType.PERCENTAGE, product_id=None, category_id=None,
                  min_order_amount="0", start=None, end=None, is_active=True):
    return Discount(
        id=id,
        name=f"discount {id}",
        discount_type=discount_type,
        value=Decimal(value),
        min_order_amount=Decimal(min_order_amount),
        product_id=product_id,
        category_id=category_id,
        start_date=start or NOW - timedelta(days=1),
        end_date=end or NOW + timedelta(days=1),
        is_active=is_active,
    )


class TestDiscountAmount:
    def test_percentage(self):
        assert calculate_discount_amount(DiscountType.PERCENTAGE, "10", "3500") == Decimal("350.00")

    def test_percentage_rounds_half_up_to_cents(self):
        assert calculate_discount_amount(DiscountType.PERCENTAGE, "15", "0.99") == Decimal("0.15")

    def test_fixed(self):
        assert calculate_discount_amount(DiscountType.FIXED, "500", "3500") == Decimal("500.00")

    @pytest.mark.parametrize("discount_type, value", [
        (DiscountType.FIXED, "5000"),
        (DiscountType.PERCENTAGE, "150"),
    ])
    def test_never_exceeds_amount(self, discount_type, value):
        assert calculate_discount_amount(discount_type, value, "3500") == Decimal("3500.00")

    def test_zero_amount(self):
        assert calculate_discount_amount(DiscountType.FIXED, "500", "0") == Decimal("0.00")


class TestActiveWindow:
    def test_inside_window(self):
        assert is_discount_active(make_discount(1, "10"), NOW)

    def test_inactive_flag(self):
        assert not is_discount_active(make_discount(1, "10", is_active=False), NOW)

    def test_window_bounds_inclusive(self):
        d = make_discount(1, "10", start=NOW, end=NOW)
        assert is_discount_active(d, NOW)

    def test_expired(self):
        d = make_discount(1, "10", start=NOW - timedelta(days=5), end=NOW - timedelta(days=1))
        assert not is_discount_active(d, NOW)

    def test_naive_dates_are_read_as_utc(self):
        naive_start = (NOW - timedelta(hours=1)).replace(tzinfo=None)
        naive_end = (NOW + timedelta(hours=1)).replace(tzinfo=None)
        assert is_discount_active(make_discount(1, "10", start=naive_start, end=naive_end), NOW)


class TestItemDiscountSelection:
    def test_product_discount_beats_category_discount(self):
        by_category = make_discount(1, "50", category_id=7)
        by_product = make_discount(2, "5", product_id=3)
        chosen = select_item_discount(3, 7, [by_category, by_product], NOW)
        assert chosen is by_product

    def test_falls_back_to_category(self):
        by_category = make_discount(1, "20", category_id=7)
        other_product = make_discount(2, "90", product_id=99)
        assert select_item_discount(3, 7, [by_category, other_product], NOW) is by_category

    def test_highest_value_wins_within_scope(self):
        low = make_discount(1, "10", product_id=3)
        high = make_discount(2, "25", product_id=3)
        assert select_item_discount(3, None, [low, high], NOW) is high

    def test_highest_value_compares_raw_value_across_types(self):
        pct = make_discount(1, "30", product_id=3)
        flat = make_discount(2, "1000", discount_type=DiscountType.FIXED, product_id=3)
        assert select_item_discount(3, None, [pct, flat], NOW) is flat

    def test_tie_goes_to_lowest_id(self):
        first = make_discount(4, "10", product_id=3)
        second = make_discount(9, "10", product_id=3)
        assert select_item_discount(3, None, [second, first], NOW) is first

    def test_ignores_inactive_and_global(self):
        inactive = make_discount(1, "50", product_id=3, is_active=False)
        global_ = make_discount(2, "50")
        assert select_item_discount(3, None, [inactive, global_], NOW) is None

    def test_product_without_category_ignores_category_discounts(self):
        by_category = make_discount(1, "50", category_id=7)
        assert select_item_discount(3, None, [by_category], NOW) is None


class TestPriceLine:
    def test_no_discount(self):
        line = price_line(1, None, "3500", 2, [], NOW)
        assert line.subtotal == Decimal("7000.00")
        assert line.discount_amount == Decimal("0.00")
        assert line.discount_id is None

    def test_percentage_item_discount(self):
        d = make_discount(5, "10", product_id=1)
        line = price_line(1, None, "3500", 3, [d], NOW)
        assert line.unit_discount == Decimal("350.00")
        assert line.discount_amount == Decimal("1050.00")
        assert line.subtotal == Decimal("9450.00")
        assert line.gross == line.subtotal + line.discount_amount
        assert (line.discount_id, line.discount_type, line.discount_value) == (5, DiscountType.PERCENTAGE, Decimal("10.00"))

    def test_fixed_discount_above_price_gives_free_item(self):
        d = make_discount(5, "9000", discount_type=DiscountType.FIXED, category_id=2)
        line = price_line(1, 2, "3500", 2, [d], NOW)
        assert line.unit_discount == Decimal("3500.00")
        assert line.subtotal == Decimal("0.00")


class TestGlobalDiscount:
    def test_missing(self):
        with pytest.raises(DiscountNotFoundError):
            resolve_global_discount(42, None, "10000", NOW)

    @pytest.mark.parametrize("scope", [{"product_id": 1}, {"category_id": 2}])
    def test_scoped_discount_cannot_be_selected(self, scope):
        d = make_discount(3, "10", **scope)
        with pytest.raises(DiscountNotEligibleError) as exc:
            resolve_global_discount(3, d, "10000", NOW)
        assert "applied automatically" in str(exc.value)

    def test_expired(self):
        d = make_discount(3, "10", start=NOW - timedelta(days=3), end=NOW - timedelta(days=2))
        with pytest.raises(DiscountExpiredError):
            resolve_global_discount(3, d, "10000", NOW)

    def test_inactive(self):
        with pytest.raises(DiscountExpiredError):
            resolve_global_discount(3, make_discount(3, "10", is_active=False), "10000", NOW)

    def test_minimum_order(self):
        d = make_discount(3, "10", min_order_amount="50000")
        with pytest.raises(MinimumOrderNotMetError):
            resolve_global_discount(3, d, "49999.99", NOW)
        assert resolve_global_discount(3, d, "50000", NOW) == Decimal("5000.00")

    def test_fixed_clamped_to_order_total(self):
        d = make_discount(3, "20000", discount_type=DiscountType.FIXED)
        assert resolve_global_discount(3, d, "15000", NOW) == Decimal("15000.00")


class TestChange:
    def test_overpayment(self):
        assert calculate_change("50000", "32000") == Decimal("18000.00")

    def test_underpayment_gives_zero_change(self):
        assert calculate_change("20000", "32000") == Decimal("0.00")

    def test_no_payment(self):
        assert calculate_change(None, "32000") == Decimal("0.00")
