import os

os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("DB_TYPE", "sqlite")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import func, select

from app.core.db import Base, build_engine, build_sessionmaker, get_db
from app.core.security import create_access_token
from app.models import Category, Discount, DiscountType, Product, Transaction, User


NOW = datetime(2026, 10, 18, 5, 0, tzinfo=timezone.utc)


class Factory:
    """Writes fixture rows through its own session and commits each one."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def _save(self, obj):
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
        return obj

    async def user(self, username="kasir", role="cashier", password_hash="not-a-real-hash"):
        return await self._save(User(username=username, role=role, password_hash=password_hash, is_active=True))

    async def category(self, name="Minuman"):
        return await self._save(Category(name=name))

    async def product(self, name="Teh Botol", price="3500", stock=10, cost_price=None, category=None):
        return await self._save(Product(
            name=name,
            price=Decimal(price),
            cost_price=Decimal(cost_price) if cost_price is not None else None,
            stock=stock,
            category_id=category.id if category is not None else None,
        ))

    async def discount(
        self,
        name="Promo",
        discount_type=DiscountType.PERCENTAGE,
        value="10",
        min_order_amount="0",
        product=None,
        category=None,
        start=None,
        end=None,
        is_active=True,
    ):
        return await self._save(Discount(
            name=name,
            discount_type=discount_type,
            value=Decimal(value),
            min_order_amount=Decimal(min_order_amount),
            product_id=product.id if product is not None else None,
            category_id=category.id if category is not None else None,
            start_date=start or datetime.now(timezone.utc) - timedelta(days=1),
            end_date=end or datetime.now(timezone.utc) + timedelta(days=1),
            is_active=is_active,
        ))

    async def transaction(self, total_amount="5000", created_at=None):
        txn = Transaction(
            total_amount=Decimal(total_amount),
            discount_amount=Decimal("0"),
            change_amount=Decimal("0"),
        )
        if created_at is not None:
            txn.created_at = created_at
        return await self._save(txn)

    async def stock_of(self, product_id):
        async with self.session_factory() as session:
            return await session.scalar(select(Product.stock).where(Product.id == product_id))

    async def count(self, model):
        async with self.session_factory() as session:
            return await session.scalar(select(func.count()).select_from(model))


@pytest.fixture
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'kasir_test.db'}", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def factory(session_factory):
    return Factory(session_factory)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
async def cashier(factory):
    return await factory.user("kasir", "cashier")


@pytest.fixture
async def admin(factory):
    return await factory.user("admin", "admin")


@pytest.fixture
async def client(session_factory):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
