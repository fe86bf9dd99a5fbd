from types import SimpleNamespace

import pytest

from app.core.exceptions import InsufficientStockError, ProductNotFoundError
from app.services.inventory_service import (
    aggregate_quantities,
    decrement_stock,
    load_products_for_update,
    validate_stock,
)


def item(product_id, quantity):
    return SimpleNamespace(product_id=product_id, quantity=quantity)


def test_aggregate_quantities_sums_repeated_products():
    requested = aggregate_quantities([item(2, 1), item(1, 4), item(2, 3)])
    assert requested == {2: 4, 1: 4}
    assert list(requested) == [2, 1]


def test_validate_stock_unknown_product():
    products = {1: SimpleNamespace(id=1, stock=10)}
    with pytest.raises(ProductNotFoundError) as exc:
        validate_stock({1: 2, 5: 1}, products)
    assert exc.value.product_id == 5


def test_validate_stock_insufficient():
    products = {1: SimpleNamespace(id=1, stock=10), 2: SimpleNamespace(id=2, stock=1)}
    with pytest.raises(InsufficientStockError) as exc:
        validate_stock({1: 10, 2: 2}, products)
    assert (exc.value.product_id, exc.value.requested, exc.value.available) == (2, 2, 1)


def test_validate_stock_exact_amount_is_enough():
    validate_stock({1: 10}, {1: SimpleNamespace(id=1, stock=10)})


async def test_load_products_for_update_returns_map(db, factory):
    a = await factory.product("A")
    b = await factory.product("B")
    products = await load_products_for_update(db, [b.id, a.id, b.id, 999])
    assert set(products) == {a.id, b.id}
    assert products[a.id].name == "A"


async def test_decrement_stock_success(db, factory):
    a = await factory.product("A", stock=5)
    b = await factory.product("B", stock=3)

    await decrement_stock(db, {a.id: 2, b.id: 3})
    await db.commit()

    assert await factory.stock_of(a.id) == 3
    assert await factory.stock_of(b.id) == 0


async def test_decrement_stock_refuses_to_go_negative(db, factory):
    a = await factory.product("A", stock=5)
    b = await factory.product("B", stock=1)

    with pytest.raises(InsufficientStockError) as exc:
        await decrement_stock(db, {a.id: 2, b.id: 2})
    await db.rollback()

    assert exc.value.product_id == b.id
    assert exc.value.available == 1
    assert await factory.stock_of(a.id) == 5
    assert await factory.stock_of(b.id) == 1


async def test_decrement_stock_catches_stale_validation(db, factory, session_factory):
    """Stock drained by someone else after validation still cannot oversell."""
    a = await factory.product("A", stock=4)
    products = await load_products_for_update(db, [a.id])
    validate_stock({a.id: 3}, products)
    await db.commit()

    async with session_factory() as other:
        await decrement_stock(other, {a.id: 2})
        await other.commit()

    with pytest.raises(InsufficientStockError):
        await decrement_stock(db, {a.id: 3})
    await db.rollback()
    assert await factory.stock_of(a.id) == 2


async def test_decrement_stock_unknown_product(db, factory):
    with pytest.raises(ProductNotFoundError):
        await decrement_stock(db, {12345: 1})
