"""API 엔드포인트 패키지 - export only."""

from .routes import (
    cart_router,
    catalog_router,
    get_cart,
    get_catalog_store,
    get_storage_adapter,
    health_router,
)

__all__ = [
    "health_router",
    "catalog_router",
    "cart_router",
    "get_catalog_store",
    "get_storage_adapter",
    "get_cart",
]
