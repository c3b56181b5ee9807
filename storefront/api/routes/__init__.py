"""API routes package."""

from .dependencies import get_cart, get_catalog_store, get_storage_adapter
from .health_routes import router as health_router
from .catalog_routes import router as catalog_router
from .cart_routes import router as cart_router

__all__ = [
    "health_router",
    "catalog_router",
    "cart_router",
    "get_catalog_store",
    "get_storage_adapter",
    "get_cart",
]
