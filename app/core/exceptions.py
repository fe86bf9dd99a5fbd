# app/core/exceptions.py
"""
Domain errors raised by the services.

Business rule failures subclass ValueError and lookups subclass LookupError,
so routers can keep translating them with plain `except ValueError` (400) and
`except LookupError` (404).
"""


class CheckoutError(ValueError):
    """A cart was rejected before anything was committed."""


class EmptyCartError(CheckoutError):
    def __init__(self):
        super().__init__("Cart must contain at least one item")


class InvalidQuantityError(CheckoutError):
    def __init__(self, product_id: int, quantity: int):
        self.product_id = product_id
        self.quantity = quantity
        super().__init__(f"Quantity for product ID {product_id} must be greater than zero (got {quantity})")


class ProductNotFoundError(CheckoutError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")


class InsufficientStockError(CheckoutError):
    def __init__(self, product_id: int, requested: int, available: int | None = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        if available is None:
            msg = f"Insufficient stock for product ID {product_id} (requested {requested})"
        else:
            msg = f"Insufficient stock for product ID {product_id} (requested {requested}, available {available})"
        super().__init__(msg)


class DiscountNotFoundError(CheckoutError):
    def __init__(self, discount_id: int):
        self.discount_id = discount_id
        super().__init__(f"Discount with ID {discount_id} not found")


class DiscountNotEligibleError(CheckoutError):
    def __init__(self, discount_id: int, reason: str):
        self.discount_id = discount_id
        super().__init__(f"Discount with ID {discount_id} cannot be used: {reason}")


class DiscountExpiredError(CheckoutError):
    def __init__(self, discount_id: int):
        self.discount_id = discount_id
        super().__init__(f"Discount with ID {discount_id} is inactive or outside its validity period")


class MinimumOrderNotMetError(CheckoutError):
    def __init__(self, discount_id: int, min_order_amount, order_total):
        self.discount_id = discount_id
        self.min_order_amount = min_order_amount
        self.order_total = order_total
        super().__init__(
            f"Minimum order of {min_order_amount} for discount ID {discount_id} not met (order total {order_total})"
        )


class TransactionNotFoundError(LookupError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction with ID {transaction_id} not found")


class PurchaseError(ValueError):
    """A purchase (restock) request was rejected."""


class PurchaseNotFoundError(LookupError):
    def __init__(self, purchase_id: int):
        self.purchase_id = purchase_id
        super().__init__(f"Purchase with ID {purchase_id} not found")
