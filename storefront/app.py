"""FastAPI 앱 팩토리"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api import cart_router, catalog_router, health_router
from storefront.clients import FeedClient
from storefront.core.config import Settings, settings as default_settings
from storefront.core.exceptions import (
    CartException,
    DataFormatError,
    FetchError,
    InvalidCartDataError,
    InvalidQuantityError,
    ItemNotFoundError,
    ProductNotFoundError,
    StorageException,
    StorefrontException,
)
from storefront.core.logging import logger
from storefront.engine import Cart, CatalogStore, EventNotifier, StorageAdapter
from storefront.schemas.api_schema import ApiResponse
from storefront.services import create_storage_backend

# 구체적인 예외가 먼저 매칭되도록 순서 유지
_STATUS_BY_EXCEPTION: tuple[tuple[type[StorefrontException], int], ...] = (
    (ProductNotFoundError, 404),
    (ItemNotFoundError, 404),
    (InvalidQuantityError, 422),
    (InvalidCartDataError, 422),
    (CartException, 409),
    (FetchError, 503),
    (DataFormatError, 502),
    (StorageException, 503),
)


def status_code_for(exc: StorefrontException) -> int:
    """예외 계열별 HTTP 상태 코드"""
    for exc_type, status_code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def storefront_exception_handler(request: Request, exc: StorefrontException) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"[API] {request.method} {request.url.path} rejected: {exc.error_code}")

    body = ApiResponse(
        status="fail",
        data=exc.details or None,
        message=exc.message,
        error_code=exc.error_code,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """애플리케이션 생명주기

        저장소/피드/카탈로그/장바구니를 만들어 app.state에 올립니다.
        """
        logger.info("Starting application...")

        storage = StorageAdapter(create_storage_backend(settings))
        feed_client = FeedClient(settings.catalog_feed_url, timeout_s=settings.catalog_fetch_timeout_s)
        catalog = CatalogStore(storage, feed_client, settings)
        notifier = EventNotifier()
        cart = Cart(catalog, storage, settings, notifier=notifier)

        app.state.settings = settings
        app.state.storage = storage
        app.state.feed_client = feed_client
        app.state.catalog = catalog
        app.state.notifier = notifier
        app.state.cart = cart

        try:
            await catalog.load_products()
        except (FetchError, DataFormatError) as e:
            logger.error(f"Initial catalog load failed: {e}")

        await cart.load()
        logger.info("Application started")
        yield

        logger.info("Shutting down application...")
        await feed_client.close()

    return lifespan


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    FastAPI 앱 생성 (Factory Pattern)

    Args:
        settings: 앱 설정 (기본값: 환경 변수 기반 전역 설정)

    Returns:
        FastAPI 앱 인스턴스
    """
    settings = settings or default_settings

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=build_lifespan(settings),
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StorefrontException, storefront_exception_handler)

    # 라우터 등록
    app.include_router(health_router)
    app.include_router(catalog_router)
    app.include_router(cart_router)

    return app


# 앱 인스턴스 생성 (uvicorn이 로드할 수 있도록)
app = create_app()
