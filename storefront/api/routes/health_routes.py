"""헬스 체크 엔드포인트"""
from fastapi import APIRouter, Depends

from storefront import __version__
from storefront.api.routes.dependencies import get_catalog_store, get_storage_adapter
from storefront.engine import CatalogStore, StorageAdapter
from storefront.schemas.api_schema import HealthResponse
from storefront.utils.time_utils import utcnow

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    storage: StorageAdapter = Depends(get_storage_adapter),
    catalog: CatalogStore = Depends(get_catalog_store),
):
    """
    헬스 체크 엔드포인트

    - 저장소 연결 상태
    - 카탈로그 로드/캐시 상태
    """
    # 백엔드 예외는 어댑터에서 False로 변환됨
    storage_ok = storage.health_check()
    catalog_loaded = bool(catalog.products)

    status = "ok" if storage_ok and catalog_loaded else ("degraded" if storage_ok or catalog_loaded else "error")

    return HealthResponse(
        status=status,
        timestamp=utcnow(),
        version=__version__,
        storage_ok=storage_ok,
        catalog_loaded=catalog_loaded,
        cache_valid=catalog.is_cache_valid(),
    )


@router.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": "Storefront Engine",
        "version": __version__,
        "docs": "/docs"
    }
