# app/models/discount_models.py
import enum
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, Enum, ForeignKey, CheckConstraint, Index
)
from app.core.db import Base, UTCDateTime


class DiscountType(str, enum.Enum):
    PERCENTAGE = "PERCENTAGE"  # value is a percent of the amount
    FIXED = "FIXED"            # value is a flat amount


discount_type_enum = Enum(DiscountType, name="discount_type")


class Discount(Base):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    discount_type = Column(discount_type_enum, nullable=False)
    value = Column(Numeric(14, 2), nullable=False)
    min_order_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    # Scope: product, category, or neither (global). Never both.
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=True, index=True)

    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint(value >= 0, name="check_discount_value_non_negative"),
        CheckConstraint(
            "product_id IS NULL OR category_id IS NULL",
            name="check_discount_single_scope",
        ),
        Index("ix_discount_active_window", "is_active", "start_date", "end_date"),
    )

    @property
    def is_global(self) -> bool:
        return self.product_id is None and self.category_id is None

    def __repr__(self):
        return f"<Discount(id={self.id}, name='{self.name}', type={self.discount_type}, value={self.value})>"
