"""CatalogStore 단위 테스트 (캐시 수명주기 / 폴백 / 조회)"""
import asyncio
import json

import pytest

from conftest import FakeFeedClient
from fixtures import FEED
from storefront.clients import FeedClient
from storefront.core.exceptions import DataFormatError, FetchError
from storefront.engine import CatalogStore
from storefront.utils.time_utils import to_epoch_ms


class TestLoadProducts:
    """load_products 캐시/폴백 동작"""

    @pytest.mark.asyncio
    async def test_first_load_fetches_and_caches(self, catalog, feed_client, memory_backend, clock):
        products = await catalog.load_products()

        assert len(products) == 8
        assert feed_client.calls == 1
        assert catalog.last_fetch == clock.now
        assert catalog.error is None
        assert catalog.is_loading is False

        record = json.loads(memory_backend.get("storefront:catalog"))
        assert record["timestamp"] == to_epoch_ms(clock.now)
        assert record["products"][0]["inStock"] is True

    @pytest.mark.asyncio
    async def test_valid_cache_skips_fetch(self, catalog, feed_client, clock):
        await catalog.load_products()
        clock.advance(hours=23, minutes=59)

        await catalog.load_products()

        assert feed_client.calls == 1
        assert catalog.is_cache_valid() is True

    @pytest.mark.asyncio
    async def test_expired_cache_refetches(self, catalog, feed_client, clock):
        await catalog.load_products()
        clock.advance(hours=24)

        assert catalog.is_cache_valid() is False
        await catalog.load_products()
        assert feed_client.calls == 2

    @pytest.mark.asyncio
    async def test_force_refresh_ignores_valid_cache(self, catalog, feed_client):
        await catalog.load_products()
        await catalog.load_products(force_refresh=True)
        assert feed_client.calls == 2

    @pytest.mark.asyncio
    async def test_cache_from_storage_is_reused(self, storage, settings, clock):
        """다른 인스턴스가 저장한 캐시를 재사용"""
        first = CatalogStore(storage, FakeFeedClient(), settings, clock=clock)
        await first.load_products()

        second_feed = FakeFeedClient()
        second = CatalogStore(storage, second_feed, settings, clock=clock)
        products = await second.load_products()

        assert second_feed.calls == 0
        assert [p.id for p in products] == [p.id for p in first.products]

    @pytest.mark.asyncio
    async def test_fetch_failure_falls_back_to_expired_cache(self, catalog, feed_client, clock):
        await catalog.load_products()
        clock.advance(days=3)
        feed_client.error = FetchError("feed", "HTTP error! status: 500")

        products = await catalog.load_products()

        assert len(products) == 8
        assert catalog.error is not None
        assert "HTTP error" in catalog.error

    @pytest.mark.asyncio
    async def test_format_error_falls_back_to_cache(self, catalog, feed_client):
        await catalog.load_products()
        feed_client.payload = {"products": "broken"}

        products = await catalog.load_products(force_refresh=True)
        assert len(products) == 8

    @pytest.mark.asyncio
    async def test_undecodable_feed_file_falls_back_to_cache(self, storage, settings, clock, tmp_path):
        feed_file = tmp_path / "products.json"
        feed_file.write_text(json.dumps(FEED), encoding="utf-8")
        catalog = CatalogStore(storage, FeedClient(str(feed_file)), settings, clock=clock)
        await catalog.load_products()

        feed_file.write_bytes(b'{"products": [{"id": "\xff\xfe"}]}')
        clock.advance(hours=25)
        products = await catalog.load_products()

        assert len(products) == 8
        assert "UTF-8" in catalog.error

    @pytest.mark.asyncio
    async def test_failure_without_cache_raises(self, storage, settings, clock):
        catalog = CatalogStore(storage, FakeFeedClient(error=FetchError("feed", "timeout")), settings, clock=clock)

        with pytest.raises(FetchError):
            await catalog.load_products()
        assert catalog.products == []
        assert catalog.is_loading is False

    @pytest.mark.asyncio
    async def test_invalid_feed_without_cache_raises(self, storage, settings, clock):
        catalog = CatalogStore(storage, FakeFeedClient(payload={"items": []}), settings, clock=clock)

        with pytest.raises(DataFormatError):
            await catalog.load_products()

    @pytest.mark.asyncio
    async def test_corrupted_cache_is_discarded(self, catalog, feed_client, memory_backend):
        memory_backend.set("storefront:catalog", "{not json")

        products = await catalog.load_products()

        assert len(products) == 8
        assert feed_client.calls == 1
        assert json.loads(memory_backend.get("storefront:catalog"))["products"]

    @pytest.mark.asyncio
    async def test_cache_with_wrong_shape_is_discarded(self, catalog, feed_client, memory_backend):
        memory_backend.set("storefront:catalog", json.dumps({"products": 3}))

        await catalog.load_products()
        assert feed_client.calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_loads_fetch_once(self, catalog, feed_client):
        results = await asyncio.gather(*(catalog.load_products() for _ in range(5)))

        assert feed_client.calls == 1
        assert all(len(r) == 8 for r in results)

    @pytest.mark.asyncio
    async def test_clear_cache(self, catalog, feed_client, memory_backend):
        await catalog.load_products()
        await catalog.clear_cache()

        assert memory_backend.get("storefront:catalog") is None
        assert catalog.is_cache_valid() is False

        await catalog.load_products()
        assert feed_client.calls == 2


class TestLookups:
    """조회 헬퍼"""

    @pytest.mark.asyncio
    async def test_get_product_by_id(self, catalog):
        await catalog.load_products()
        assert catalog.get_product_by_id("eta-mug").name == "Eta Mug"
        assert catalog.get_product_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_categories(self, catalog):
        await catalog.load_products()
        categories = {c.id: c for c in catalog.get_categories()}

        assert categories["books"].name == "books"
        assert categories["home"].description == "Home goods"
        assert [p.id for p in catalog.get_products_by_category("home")] == [
            "gamma-lamp",
            "eta-mug",
            "theta-blanket",
        ]
        assert catalog.get_products_by_category("unknown") == []

    @pytest.mark.asyncio
    async def test_featured_new_sale(self, catalog):
        await catalog.load_products()

        assert [p.id for p in catalog.get_featured_products(3)] == [
            "epsilon-headphones",
            "alpha-phone",
            "delta-case",
        ]
        assert {p.id for p in catalog.get_new_products()} == {"alpha-phone", "delta-case", "epsilon-headphones"}
        assert [p.id for p in catalog.get_sale_products()] == ["epsilon-headphones"]

    @pytest.mark.asyncio
    async def test_related_products(self, catalog):
        """같은 카테고리 우선, 그다음 가격 차이 30% 미만"""
        await catalog.load_products()
        related = [p.id for p in catalog.get_related_products("eta-mug")]

        # eta-mug 12.5 -> window 3.75, 다른 카테고리는 해당 없음
        assert related == ["gamma-lamp", "theta-blanket"]
        assert catalog.get_related_products("missing") == []

    @pytest.mark.asyncio
    async def test_related_products_price_window(self, catalog):
        await catalog.load_products()
        related = [p.id for p in catalog.get_related_products("zeta-book")]

        # zeta-book 50.0 -> |price - 50| < 15
        assert related == ["theta-blanket"]

    @pytest.mark.asyncio
    async def test_category_stats(self, catalog):
        await catalog.load_products()
        stats = catalog.get_category_stats()

        assert stats["home"].count == 3
        assert stats["home"].price_range.min == 12.5
        assert stats["electronics"].average_rating == pytest.approx(4.55)
        assert stats["books"].count == 1

    @pytest.mark.asyncio
    async def test_price_range(self, catalog):
        await catalog.load_products()
        assert catalog.get_price_range().max == 150.0


class TestAdvancedSearch:
    """advanced_search 파이프라인"""

    @pytest.mark.asyncio
    async def test_defaults(self, catalog):
        result = await catalog.advanced_search()

        assert result.page == 1
        assert result.per_page == 12
        assert result.total == 8
        assert result.total_pages == 1
        assert result.items[0].id == "epsilon-headphones"
        assert result.filters == {}

    @pytest.mark.asyncio
    async def test_facets_are_computed_before_pagination(self, catalog):
        result = await catalog.advanced_search({"categories": "home", "perPage": 1, "page": 2})

        assert len(result.items) == 1
        assert result.total == 3
        assert result.facets.total_products == 3
        assert result.facets.categories == {"home": 3}
        assert result.has_next is True
        assert result.has_prev is True
        assert result.filters == {"categories": ["home"]}

    @pytest.mark.asyncio
    async def test_invalid_params_fall_back(self, catalog):
        result = await catalog.advanced_search(
            {"sortBy": "bogus", "sortOrder": "up", "page": "-3", "perPage": "abc"}
        )

        assert result.page == 1
        assert result.per_page == 12
        popularity = [p.popularity for p in result.items]
        assert popularity == sorted(popularity)

    @pytest.mark.asyncio
    async def test_query_filter_and_sort(self, catalog):
        result = await catalog.advanced_search(
            {"query": "phone", "inStock": True, "sortBy": "price", "sortOrder": "asc"}
        )
        assert [p.id for p in result.items] == ["delta-case", "alpha-phone", "epsilon-headphones"]
        assert result.filters == {"inStock": True}
