"""Query Engine - 상품 컬렉션에 대한 순수 함수 모음

파이프라인 순서: search -> filter -> sort -> paginate
패싯은 filter 직후(정렬/페이지네이션 이전) 집합으로 계산합니다.
"""

from __future__ import annotations

import locale
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence, TypeVar

from storefront.schemas.catalog_schema import (
    Facets,
    PriceRange,
    Product,
    SortKey,
    SortOrder,
)
from storefront.utils.money import round_money


DEFAULT_PER_PAGE = 12

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

def tokenize_query(query: Optional[str]) -> list[str]:
    """소문자 + trim 후 공백 기준 분리"""
    if not query:
        return []
    return query.lower().strip().split()


def build_searchable_text(product: Product) -> str:
    """이름, 설명, 카테고리, 사양 값을 이어붙인 검색 대상 문자열"""
    parts = [product.name, product.description, product.category, *product.specs.values()]
    return " ".join(parts).lower()


def search_products(products: Sequence[Product], query: Optional[str]) -> list[Product]:
    """모든 토큰이 부분 문자열로 포함된 상품만 반환 (AND, substring)

    빈 쿼리는 입력을 그대로 반환합니다.
    """
    tokens = tokenize_query(query)
    if not tokens:
        return list(products)

    matched = []
    for product in products:
        text = build_searchable_text(product)
        if all(token in text for token in tokens):
            matched.append(product)
    return matched


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------

@dataclass
class FilterCriteria:
    """필터 조건 (모두 선택, AND 결합)"""

    categories: Optional[list[str]] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    rating: Optional[float] = None
    in_stock: bool = False
    is_new: bool = False
    on_sale: bool = False

    def applied(self) -> dict[str, Any]:
        """실제로 적용되는 조건만 camelCase dict로 반환"""
        applied: dict[str, Any] = {}
        if self.categories:
            applied["categories"] = list(self.categories)
        if self.price_min is not None:
            applied["priceMin"] = self.price_min
        if self.price_max is not None:
            applied["priceMax"] = self.price_max
        if self.rating is not None:
            applied["rating"] = self.rating
        if self.in_stock:
            applied["inStock"] = True
        if self.is_new:
            applied["isNew"] = True
        if self.on_sale:
            applied["onSale"] = True
        return applied


def _matches(product: Product, criteria: FilterCriteria) -> bool:
    if criteria.categories and product.category not in criteria.categories:
        return False
    if criteria.price_min is not None and product.price < criteria.price_min:
        return False
    if criteria.price_max is not None and product.price > criteria.price_max:
        return False
    if criteria.rating is not None and product.rating < criteria.rating:
        return False
    if criteria.in_stock and not product.in_stock:
        return False
    if criteria.is_new and not product.is_new:
        return False
    if criteria.on_sale and not product.on_sale:
        return False
    return True


def filter_products(products: Sequence[Product], criteria: Optional[FilterCriteria] = None) -> list[Product]:
    """조건을 모두 만족하는 상품만 반환"""
    if criteria is None:
        return list(products)
    return [p for p in products if _matches(p, criteria)]


# ---------------------------------------------------------------------------
# Sort
# ---------------------------------------------------------------------------

def _name_key(product: Product) -> tuple[str, str]:
    return (locale.strxfrm(product.name.casefold()), locale.strxfrm(product.name))


_SORT_KEYS = {
    SortKey.PRICE: lambda p: p.price,
    SortKey.RATING: lambda p: p.rating,
    SortKey.NAME: _name_key,
    SortKey.POPULARITY: lambda p: p.popularity,
}


def sort_products(
    products: Sequence[Product],
    sort_by: SortKey | str = SortKey.POPULARITY,
    order: SortOrder | str = SortOrder.DESC,
) -> list[Product]:
    """안정 오름차순 정렬 후 desc면 결과를 뒤집음

    sorted(reverse=True)는 동점 항목의 원래 순서를 유지하지만,
    여기서는 오름차순 결과를 뒤집으므로 동점 항목이 오름차순의 역순으로 나옵니다.
    """
    try:
        key = SortKey(sort_by)
    except ValueError:
        key = SortKey.POPULARITY

    ordered = sorted(products, key=_SORT_KEYS[key])
    if SortOrder.DESC.value == str(getattr(order, "value", order)).lower():
        ordered.reverse()
    return ordered


# ---------------------------------------------------------------------------
# Paginate
# ---------------------------------------------------------------------------

@dataclass
class Page:
    """페이지네이션 결과"""

    items: list = field(default_factory=list)
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE
    total: int = 0
    total_pages: int = 0
    has_next: bool = False
    has_prev: bool = False


def paginate(items: Sequence[T], page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> Page:
    """1-based 페이지 슬라이스. 범위를 벗어난 페이지는 빈 items."""
    if per_page <= 0:
        per_page = DEFAULT_PER_PAGE
    start = (page - 1) * per_page
    end = start + per_page
    total = len(items)
    return Page(
        items=list(items[start:end]) if start >= 0 else [],
        page=page,
        per_page=per_page,
        total=total,
        total_pages=math.ceil(total / per_page),
        has_next=end < total,
        has_prev=page > 1,
    )


# ---------------------------------------------------------------------------
# Facets
# ---------------------------------------------------------------------------

def compute_price_range(products: Iterable[Product]) -> PriceRange:
    """최소/최대/평균 가격 (평균은 소수점 둘째 자리 반올림)"""
    prices = [p.price for p in products]
    if not prices:
        return PriceRange(min=0.0, max=0.0, average=0.0)
    return PriceRange(
        min=min(prices),
        max=max(prices),
        average=round_money(sum(prices) / len(prices)),
    )


def compute_facets(products: Sequence[Product]) -> Facets:
    """카테고리 수, 평점 히스토그램(1~5), 가격 범위, 재고 수

    floor(rating)이 1~5 밖인 상품은 히스토그램에서 제외되지만 total_products 에는 포함됩니다.
    """
    categories: dict[str, int] = {}
    rating_counts = {bucket: 0 for bucket in range(1, 6)}

    for product in products:
        categories[product.category] = categories.get(product.category, 0) + 1
        bucket = math.floor(product.rating)
        if 1 <= bucket <= 5:
            rating_counts[bucket] += 1

    return Facets(
        categories=categories,
        price_range=compute_price_range(products),
        rating_counts=rating_counts,
        total_products=len(products),
        in_stock_count=sum(1 for p in products if p.in_stock),
    )
