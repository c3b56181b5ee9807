"""Catalog Store - 정규화된 카탈로그와 캐시 수명주기 관리

Flow (load_products):
1. 유효한 캐시(24시간 이내)가 있고 force_refresh가 아니면 캐시 반환
2. 피드 요청 -> 검증 -> 정규화 -> 캐시 저장
3. 요청/파싱 실패 시 마지막 캐시(만료되었더라도)로 폴백
4. 캐시가 전혀 없으면 원래 예외를 전파
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from storefront.core.config import Settings
from storefront.core.exceptions import (
    DataFormatError,
    FetchError,
    PersistenceError,
    StorageConnectionError,
    StorageCorruptionError,
)
from storefront.core.logging import logger
from storefront.schemas.catalog_schema import (
    CachedCatalog,
    Category,
    CategoryStats,
    PriceRange,
    Product,
    QueryParams,
    SearchResult,
)
from storefront.utils.time_utils import to_epoch_ms, utcnow

from .normalization import normalize_feed
from .query import (
    DEFAULT_PER_PAGE,
    FilterCriteria,
    compute_facets,
    compute_price_range,
    filter_products,
    paginate,
    search_products,
    sort_products,
)
from .storage_adapter import StorageAdapter


RELATED_PRICE_WINDOW = 0.3


class CatalogStore:
    """카탈로그 저장소

    상품/카테고리 컬렉션을 소유하며, 캐시 유효성은 조회 시점에 lazy하게 판단합니다.
    동시에 호출된 load_products는 Lock으로 직렬화되므로, 먼저 들어온 요청이
    캐시를 갱신하면 뒤의 요청은 추가 fetch 없이 캐시를 반환합니다.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        feed_client,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            storage: 저장소 어댑터
            feed_client: 피드 클라이언트 (fetch_json 메서드 구현)
            settings: 설정 (기본값: 환경 변수 기반 Settings)
            clock: 현재 시각 함수 (테스트 주입용)
        """
        if storage is None:
            raise ValueError("storage must not be None")
        if feed_client is None:
            raise ValueError("feed_client must not be None")

        self.storage = storage
        self.feed_client = feed_client
        self.settings = settings or Settings()
        self._clock = clock

        self.products: list[Product] = []
        self.categories: list[Category] = []
        self.is_loading = False
        self.error: Optional[str] = None
        self.last_fetch: Optional[datetime] = None

        self._cache: Optional[CachedCatalog] = None
        self._cache_read = False
        self._load_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Cache lifecycle
    # ------------------------------------------------------------------

    @property
    def cache_key(self) -> str:
        return self.settings.catalog_cache_key

    @property
    def cache_duration(self) -> timedelta:
        return timedelta(seconds=self.settings.catalog_cache_ttl)

    def is_cache_valid(self) -> bool:
        """now - timestamp < 24h"""
        if self._cache is None:
            return False
        age_ms = to_epoch_ms(self._clock()) - self._cache.timestamp
        return age_ms < self.cache_duration.total_seconds() * 1000

    async def _read_cache(self) -> Optional[CachedCatalog]:
        """저장소에서 캐시 레코드를 한 번만 읽음 (손상 시 삭제 후 None)"""
        if self._cache_read:
            return self._cache
        self._cache_read = True

        try:
            record = await self.storage.get_json(self.cache_key)
        except StorageCorruptionError as e:
            logger.warning(f"Catalog cache corrupted, discarding: {e}")
            await self.storage.delete(self.cache_key)
            return None
        except StorageConnectionError as e:
            logger.warning(f"Catalog cache unavailable: {e}")
            return None

        if record is None:
            return None

        try:
            self._cache = CachedCatalog.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Catalog cache has invalid shape, discarding: {e.error_count()} errors")
            await self.storage.delete(self.cache_key)
            self._cache = None
        return self._cache

    async def _write_cache(self) -> None:
        self._cache = CachedCatalog(
            products=self.products,
            categories=self.categories,
            timestamp=to_epoch_ms(self._clock()),
        )
        try:
            # 만료된 캐시도 폴백으로 써야 하므로 저장소 TTL은 두지 않음
            await self.storage.set_json(self.cache_key, self._cache.to_record())
        except PersistenceError as e:
            logger.warning(f"Failed to update catalog cache: {e}")

    def _apply_cache(self, cache: CachedCatalog) -> list[Product]:
        self.products = list(cache.products)
        self.categories = list(cache.categories)
        return self.products

    async def clear_cache(self) -> None:
        """저장소 캐시 삭제 + 메모리 캐시 초기화"""
        await self.storage.delete(self.cache_key)
        self._cache = None
        self._cache_read = True
        logger.info("Catalog cache cleared")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_products(self, force_refresh: bool = False) -> list[Product]:
        """캐시 또는 피드에서 상품 로드

        Args:
            force_refresh: True면 캐시 유효 여부와 관계없이 피드 요청

        Returns:
            list[Product]: 정규화된 상품 목록

        Raises:
            FetchError / DataFormatError: 실패했고 폴백할 캐시가 없는 경우
        """
        async with self._load_lock:
            cache = await self._read_cache()
            if not force_refresh and cache is not None and self.is_cache_valid():
                return self._apply_cache(cache)

            self.is_loading = True
            self.error = None
            try:
                data = await self.feed_client.fetch_json()
                self.products, self.categories = normalize_feed(data)
                await self._write_cache()
                self.last_fetch = self._clock()
                logger.info(
                    f"Catalog loaded: products={len(self.products)}, categories={len(self.categories)}"
                )
                return self.products

            except (FetchError, DataFormatError) as e:
                self.error = e.message
                logger.error(f"Failed to load products: {e}")

                if self._cache is not None:
                    logger.warning("Falling back to cached catalog")
                    return self._apply_cache(self._cache)
                raise
            finally:
                self.is_loading = False

    async def ensure_loaded(self) -> list[Product]:
        """이미 메모리에 상품이 있고 캐시가 유효하면 그대로 사용"""
        if self.products and self.is_cache_valid():
            return self.products
        return await self.load_products()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_categories(self) -> list[Category]:
        return self.categories

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        """ID로 상품 조회 (선형 탐색). 없으면 None."""
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def get_products_by_category(self, category_id: str) -> list[Product]:
        return [p for p in self.products if p.category == category_id]

    def get_featured_products(self, limit: int = 8) -> list[Product]:
        """인기도 상위 상품"""
        return sorted(self.products, key=lambda p: p.popularity, reverse=True)[:limit]

    def get_new_products(self, limit: int = 8) -> list[Product]:
        return [p for p in self.products if p.is_new][:limit]

    def get_sale_products(self, limit: int = 8) -> list[Product]:
        return [p for p in self.products if p.on_sale][:limit]

    def get_related_products(self, product_id: str, limit: int = 6) -> list[Product]:
        """같은 카테고리 또는 가격 차이 30% 미만인 상품

        같은 카테고리 우선, 그다음 가격 차이가 작은 순.
        """
        product = self.get_product_by_id(product_id)
        if product is None:
            return []

        window = product.price * RELATED_PRICE_WINDOW
        related = [
            p for p in self.products
            if p.id != product_id
            and (p.category == product.category or abs(p.price - product.price) < window)
        ]
        related.sort(key=lambda p: (p.category != product.category, abs(p.price - product.price)))
        return related[:limit]

    def get_price_range(self, products: Optional[list[Product]] = None) -> PriceRange:
        return compute_price_range(self.products if products is None else products)

    def get_category_stats(self) -> dict[str, CategoryStats]:
        """카테고리별 상품 수 / 가격 범위 / 평균 평점"""
        stats: dict[str, CategoryStats] = {}
        for category in self.categories:
            items = self.get_products_by_category(category.id)
            average_rating = sum(p.rating for p in items) / len(items) if items else 0.0
            stats[category.id] = CategoryStats(
                name=category.name,
                count=len(items),
                price_range=compute_price_range(items),
                average_rating=average_rating,
            )
        return stats

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def advanced_search(
        self, params: Union[QueryParams, Mapping[str, Any], None] = None
    ) -> SearchResult:
        """검색 -> 필터 -> 정렬 -> 페이지네이션 (패싯은 필터 결과 기준)

        Args:
            params: QueryParams 또는 같은 필드를 가진 dict (camelCase/snake_case)

        Returns:
            SearchResult
        """
        if params is None:
            params = QueryParams()
        elif not isinstance(params, QueryParams):
            params = QueryParams.model_validate(params)

        await self.ensure_loaded()

        products = search_products(self.products, params.query)

        criteria = FilterCriteria(
            categories=params.categories,
            price_min=params.price_min,
            price_max=params.price_max,
            rating=params.rating,
            in_stock=params.in_stock,
            is_new=params.is_new,
            on_sale=params.on_sale,
        )
        products = filter_products(products, criteria)
        facets = compute_facets(products)

        products = sort_products(products, params.sort_by, params.sort_order)

        per_page = params.per_page or self.settings.items_per_page or DEFAULT_PER_PAGE
        page = paginate(products, params.page, per_page)

        return SearchResult(
            items=page.items,
            page=page.page,
            per_page=page.per_page,
            total=page.total,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_prev=page.has_prev,
            facets=facets,
            filters=criteria.applied(),
        )
