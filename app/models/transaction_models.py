# app/models/transaction_models.py
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, ForeignKey, Numeric, CheckConstraint, Index
)
from sqlalchemy.sql import func
from app.core.db import Base, UTCDateTime
from app.models.discount_models import discount_type_enum


class Transaction(Base):
    """Checkout header. Written once by the checkout service, never updated."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)

    total_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    # the global discount chosen at checkout; item discounts live on the details
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="SET NULL"), nullable=True)
    discount_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    payment_amount = Column(Numeric(14, 2), nullable=True)
    change_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    request_id = Column(String(64), nullable=True, unique=True)

    created_at = Column(UTCDateTime, server_default=func.now(), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint(total_amount >= 0, name="check_transaction_total_non_negative"),
        CheckConstraint(discount_amount >= 0, name="check_transaction_discount_non_negative"),
    )

    def __repr__(self):
        return f"<Transaction(id={self.id}, total_amount={self.total_amount})>"


class TransactionDetail(Base):
    __tablename__ = "transaction_details"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    # nullable so deleting a product keeps its sales history
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(14, 2), nullable=False)       # gross unit price at sale time
    subtotal = Column(Numeric(14, 2), nullable=False)    # net of the item discount
    cost_price = Column(Numeric(14, 2), nullable=False)  # harga beli snapshot

    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="SET NULL"), nullable=True)
    discount_type = Column(discount_type_enum, nullable=True)
    discount_value = Column(Numeric(14, 2), nullable=True)
    discount_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    created_at = Column(UTCDateTime, server_default=func.now())

    __table_args__ = (
        CheckConstraint(quantity > 0, name="check_detail_quantity_positive"),
        Index("ix_transaction_details_txn_product", "transaction_id", "product_id"),
    )
