"""Catalog Routes - 카탈로그 조회/검색

HTTP 요청을 CatalogStore 호출로 변환하는 Translator 역할만 수행합니다.
"""
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from storefront.api.routes.dependencies import get_catalog_store
from storefront.core.exceptions import ProductNotFoundError
from storefront.core.logging import logger, truncate_for_log
from storefront.engine import CatalogStore
from storefront.schemas.api_schema import ApiResponse
from storefront.schemas.catalog_schema import QueryParams

router = APIRouter(prefix="/api/v1", tags=["catalog"])

_SEARCH_FIELDS = (
    "query",
    "priceMin",
    "priceMax",
    "rating",
    "inStock",
    "isNew",
    "onSale",
    "sortBy",
    "sortOrder",
    "page",
    "perPage",
)


def _records(models) -> list[dict[str, Any]]:
    return [model.to_record() for model in models]


def _query_params_from_request(request: Request) -> QueryParams:
    """쿼리 스트링 -> QueryParams (categories는 반복 키 또는 콤마 구분)"""
    raw: dict[str, Any] = {
        name: request.query_params[name]
        for name in _SEARCH_FIELDS
        if name in request.query_params
    }
    categories = [
        part.strip()
        for value in request.query_params.getlist("categories")
        for part in value.split(",")
        if part.strip()
    ]
    if categories:
        raw["categories"] = categories
    return QueryParams.model_validate(raw)


@router.get("/products")
async def search_products(request: Request, catalog: CatalogStore = Depends(get_catalog_store)):
    """상품 검색 (검색 -> 필터 -> 정렬 -> 페이지네이션 + 패싯)"""
    try:
        params = _query_params_from_request(request)
    except ValidationError as e:
        logger.warning(f"[API] Invalid search parameters: {e.error_count()} errors")
        return JSONResponse(
            status_code=422,
            content=ApiResponse(
                status="fail",
                message="Invalid search parameters",
                error_code="INVALID_QUERY",
            ).model_dump(),
        )

    if params.query:
        logger.info(f"[API] Search request: {truncate_for_log(params.query)}")

    result = await catalog.advanced_search(params)
    return ApiResponse(status="success", data=result.to_record())


@router.get("/products/featured")
async def featured_products(limit: int = 8, catalog: CatalogStore = Depends(get_catalog_store)):
    await catalog.ensure_loaded()
    return ApiResponse(status="success", data=_records(catalog.get_featured_products(limit)))


@router.get("/products/new")
async def new_products(limit: int = 8, catalog: CatalogStore = Depends(get_catalog_store)):
    await catalog.ensure_loaded()
    return ApiResponse(status="success", data=_records(catalog.get_new_products(limit)))


@router.get("/products/sale")
async def sale_products(limit: int = 8, catalog: CatalogStore = Depends(get_catalog_store)):
    await catalog.ensure_loaded()
    return ApiResponse(status="success", data=_records(catalog.get_sale_products(limit)))


@router.get("/products/{product_id}")
async def get_product(product_id: str, catalog: CatalogStore = Depends(get_catalog_store)):
    """단일 상품 조회

    Raises:
        ProductNotFoundError: 카탈로그에 없는 ID (404)
    """
    await catalog.ensure_loaded()
    product = catalog.get_product_by_id(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return ApiResponse(status="success", data=product.to_record())


@router.get("/products/{product_id}/related")
async def related_products(
    product_id: str, limit: int = 6, catalog: CatalogStore = Depends(get_catalog_store)
):
    await catalog.ensure_loaded()
    if catalog.get_product_by_id(product_id) is None:
        raise ProductNotFoundError(product_id)
    return ApiResponse(status="success", data=_records(catalog.get_related_products(product_id, limit)))


@router.get("/categories")
async def list_categories(catalog: CatalogStore = Depends(get_catalog_store)):
    await catalog.ensure_loaded()
    return ApiResponse(status="success", data=_records(catalog.get_categories()))


@router.get("/categories/stats")
async def category_stats(catalog: CatalogStore = Depends(get_catalog_store)):
    await catalog.ensure_loaded()
    stats = {category_id: stat.to_record() for category_id, stat in catalog.get_category_stats().items()}
    return ApiResponse(status="success", data=stats)


@router.get("/categories/{category_id}/products")
async def products_by_category(category_id: str, catalog: CatalogStore = Depends(get_catalog_store)):
    await catalog.ensure_loaded()
    return ApiResponse(status="success", data=_records(catalog.get_products_by_category(category_id)))


@router.post("/catalog/refresh")
async def refresh_catalog(catalog: CatalogStore = Depends(get_catalog_store)):
    """캐시를 무시하고 피드를 다시 읽음 (실패 시 마지막 캐시로 폴백)"""
    products = await catalog.load_products(force_refresh=True)
    return ApiResponse(
        status="success",
        data={
            "products": len(products),
            "categories": len(catalog.get_categories()),
            "error": catalog.error,
        },
        message="Catalog refreshed" if catalog.error is None else "Served cached catalog",
    )
