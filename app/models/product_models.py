# app/models/product_models.py
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Numeric, CheckConstraint, ForeignKey, DateTime, func
)
from app.core.db import Base
from app.utils.decimal_utils import to_decimal


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), index=True, nullable=False)
    price = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))  # sell price
    cost_price = Column(Numeric(14, 2), nullable=True)  # harga beli, unknown until first purchase
    stock = Column(Integer, nullable=False, default=0)

    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        CheckConstraint(price >= 0, name="check_product_price_non_negative"),
        CheckConstraint(stock >= 0, name="check_product_stock_non_negative"),
    )

    @property
    def margin(self) -> Decimal | None:
        """Gross margin in percent, or None while the cost price is unknown."""
        if self.cost_price is None or not self.price:
            return None
        price = to_decimal(self.price)
        return to_decimal((price - to_decimal(self.cost_price)) / price * 100)

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"
