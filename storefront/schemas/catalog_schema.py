"""카탈로그 Pydantic 스키마"""
from enum import Enum
from typing import Any, Optional

from pydantic import ConfigDict, Field, ValidationInfo, field_validator

from storefront.schemas.base import CamelModel


DEFAULT_PAGE = 1


class Product(CamelModel):
    """정규화된 상품 (불변)

    in_stock / is_new / on_sale 은 정규화 시점에 한 번 계산됩니다.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="상품 ID")
    name: str = Field(..., description="상품명")
    description: str = Field("", description="설명")
    category: str = Field(..., description="카테고리 키")
    price: float = Field(0.0, ge=0, description="가격")
    rating: float = Field(0.0, description="평점 (0~5)")
    stock: int = Field(0, ge=0, description="재고")
    popularity: int = Field(0, description="인기도 (0~100)")
    images: list[str] = Field(default_factory=list, description="이미지 URL 목록")
    specs: dict[str, str] = Field(default_factory=dict, description="사양")

    # 파생 필드
    in_stock: bool = Field(False, description="stock > 0")
    is_new: bool = Field(False, description="popularity >= 85")
    on_sale: bool = Field(False, description="rating >= 4.5 and price > 100")


class Category(CamelModel):
    """카테고리"""
    id: str = Field(..., min_length=1)
    name: str = ""
    description: Optional[str] = None


class CachedCatalog(CamelModel):
    """저장소에 보관되는 카탈로그 캐시 레코드"""
    products: list[Product] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    timestamp: int = Field(..., description="저장 시각 (epoch ms)")


class SortKey(str, Enum):
    """정렬 기준"""
    PRICE = "price"
    RATING = "rating"
    NAME = "name"
    POPULARITY = "popularity"


class SortOrder(str, Enum):
    """정렬 방향"""
    ASC = "asc"
    DESC = "desc"


class QueryParams(CamelModel):
    """advanced_search 파라미터

    잘못된 sort_by 는 popularity, 'desc' 가 아닌 sort_order 는 오름차순,
    1 미만이거나 해석 불가한 page/per_page 는 기본값으로 처리합니다.
    """
    query: Optional[str] = None
    categories: Optional[list[str]] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    rating: Optional[float] = None
    in_stock: bool = False
    is_new: bool = False
    on_sale: bool = False
    sort_by: SortKey = SortKey.POPULARITY
    sort_order: SortOrder = SortOrder.DESC
    page: int = DEFAULT_PAGE
    per_page: Optional[int] = None  # None이면 설정값(items_per_page) 사용

    @field_validator("sort_by", mode="before")
    @classmethod
    def coerce_sort_by(cls, v: Any) -> SortKey:
        if isinstance(v, SortKey):
            return v
        try:
            return SortKey(str(v).lower())
        except ValueError:
            return SortKey.POPULARITY

    @field_validator("sort_order", mode="before")
    @classmethod
    def coerce_sort_order(cls, v: Any) -> SortOrder:
        if v is None:
            return SortOrder.DESC
        if isinstance(v, SortOrder):
            return v
        return SortOrder.DESC if str(v).lower() == "desc" else SortOrder.ASC

    @field_validator("page", "per_page", mode="before")
    @classmethod
    def coerce_positive(cls, v: Any, info: ValidationInfo) -> Optional[int]:
        fallback = DEFAULT_PAGE if info.field_name == "page" else None
        if v is None:
            return fallback
        try:
            number = int(float(v))
        except (TypeError, ValueError):
            return fallback
        return number if number >= 1 else fallback

    @field_validator("categories", mode="before")
    @classmethod
    def coerce_categories(cls, v: Any) -> Optional[list[str]]:
        if v is None:
            return None
        if isinstance(v, str):
            return [c for c in (part.strip() for part in v.split(",")) if c]
        return v


class PriceRange(CamelModel):
    """가격 범위"""
    min: float = 0.0
    max: float = 0.0
    average: float = 0.0


class Facets(CamelModel):
    """검색 패싯 (필터 후, 페이지네이션 전 집합 기준)"""
    categories: dict[str, int] = Field(default_factory=dict)
    price_range: PriceRange = Field(default_factory=PriceRange)
    rating_counts: dict[int, int] = Field(default_factory=lambda: {i: 0 for i in range(1, 6)})
    total_products: int = 0
    in_stock_count: int = 0


class SearchResult(CamelModel):
    """advanced_search 결과"""
    items: list[Product] = Field(default_factory=list)
    page: int = DEFAULT_PAGE
    per_page: int
    total: int = 0
    total_pages: int = 0
    has_next: bool = False
    has_prev: bool = False
    facets: Facets = Field(default_factory=Facets)
    filters: dict[str, Any] = Field(default_factory=dict, description="실제 적용된 필터")


class CategoryStats(CamelModel):
    """카테고리 통계"""
    name: str
    count: int = 0
    price_range: PriceRange = Field(default_factory=PriceRange)
    average_rating: float = 0.0
