# app/models/__init__.py
from app.models.user_models import User
from app.models.activity_models import UserActivity
from app.models.category_models import Category
from app.models.product_models import Product
from app.models.discount_models import Discount, DiscountType
from app.models.transaction_models import Transaction, TransactionDetail
from app.models.purchase_models import Purchase, PurchaseItem
