"""라우트 의존성 - lifespan에서 app.state에 올려둔 컴포넌트를 꺼내 제공"""
from fastapi import HTTPException, Request

from storefront.engine import Cart, CatalogStore, StorageAdapter


def _require(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        raise HTTPException(status_code=503, detail=f"{name} is not initialized")
    return component


def get_storage_adapter(request: Request) -> StorageAdapter:
    return _require(request, "storage")


def get_catalog_store(request: Request) -> CatalogStore:
    return _require(request, "catalog")


def get_cart(request: Request) -> Cart:
    return _require(request, "cart")
