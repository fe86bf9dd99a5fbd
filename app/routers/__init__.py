# app/routers/__init__.py
from fastapi import APIRouter

from .auth_router import router as auth_router
from .discounts_router import router as discounts_router
from .purchases_router import router as purchases_router
from .transactions_router import router as transactions_router

router = APIRouter(prefix="/api")

router.include_router(auth_router)
router.include_router(transactions_router)
router.include_router(discounts_router)
router.include_router(purchases_router)

__all__ = [
    "router",
    "auth_router",
    "discounts_router",
    "purchases_router",
    "transactions_router",
]
