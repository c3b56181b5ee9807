"""Feed Normalization - raw 피드 레코드를 Product로 변환

피드 레코드는 느슨한 dict로 취급하고, 모든 기본값은 PRODUCT_DEFAULTS 한 곳에서 관리합니다.
"""

from __future__ import annotations

import math
import uuid
from typing import Any, Mapping, Optional

from storefront.core.exceptions import DataFormatError
from storefront.schemas.catalog_schema import Category, Product


# 누락/손상 필드의 기본값
PRODUCT_DEFAULTS: dict[str, Any] = {
    "name": "Unknown Product",
    "description": "",
    "category": "accessories",
    "price": 0.0,
    "rating": 0.0,
    "stock": 0,
    "popularity": 0,
}

NEW_POPULARITY_THRESHOLD = 85
SALE_RATING_THRESHOLD = 4.5
SALE_PRICE_THRESHOLD = 100


def generate_product_id(prefix: str = "product") -> str:
    """ID가 없는 레코드용 임시 ID"""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


def _to_text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value)
    return text if text else default


def is_new_product(popularity: int) -> bool:
    return popularity >= NEW_POPULARITY_THRESHOLD


def is_on_sale(price: float, rating: float) -> bool:
    return rating >= SALE_RATING_THRESHOLD and price > SALE_PRICE_THRESHOLD


def normalize_product(raw: Mapping[str, Any]) -> Product:
    """raw 상품 레코드 -> Product

    - 숫자 필드: 해석 불가/누락 시 0 (price/stock 은 음수도 0으로)
    - 문자열 필드: 누락 시 PRODUCT_DEFAULTS
    - images: 리스트가 아니면 빈 리스트
    - specs: dict가 아니면 빈 dict, 값은 문자열로 변환
    """
    price = max(_to_float(raw.get("price")) or PRODUCT_DEFAULTS["price"], 0.0)
    rating = _to_float(raw.get("rating")) or PRODUCT_DEFAULTS["rating"]
    stock = max(_to_int(raw.get("stock")) or PRODUCT_DEFAULTS["stock"], 0)
    popularity = _to_int(raw.get("popularity")) or PRODUCT_DEFAULTS["popularity"]

    raw_images = raw.get("images")
    images = [str(url) for url in raw_images if url] if isinstance(raw_images, list) else []

    raw_specs = raw.get("specs")
    specs = (
        {str(k): "" if v is None else str(v) for k, v in raw_specs.items()}
        if isinstance(raw_specs, Mapping)
        else {}
    )

    return Product(
        id=_to_text(raw.get("id"), "") or generate_product_id(),
        name=_to_text(raw.get("name"), PRODUCT_DEFAULTS["name"]),
        description=_to_text(raw.get("description"), PRODUCT_DEFAULTS["description"]),
        category=_to_text(raw.get("category"), PRODUCT_DEFAULTS["category"]),
        price=price,
        rating=rating,
        stock=stock,
        popularity=popularity,
        images=images,
        specs=specs,
        in_stock=stock > 0,
        is_new=is_new_product(popularity),
        on_sale=is_on_sale(price, rating),
    )


def normalize_category(raw: Any) -> Optional[Category]:
    """raw 카테고리 레코드 -> Category (ID 없으면 None)"""
    if isinstance(raw, str) and raw:
        return Category(id=raw, name=raw)
    if not isinstance(raw, Mapping) or not raw.get("id"):
        return None
    category_id = str(raw["id"])
    description = raw.get("description")
    return Category(
        id=category_id,
        name=_to_text(raw.get("name"), category_id),
        description=str(description) if description is not None else None,
    )


def normalize_feed(data: Any) -> tuple[list[Product], list[Category]]:
    """피드 문서 검증 + 정규화

    Raises:
        DataFormatError: products 배열이 없거나 객체가 아닌 항목이 있는 경우
    """
    if not isinstance(data, Mapping):
        raise DataFormatError("feed document must be an object")

    raw_products = data.get("products")
    if not isinstance(raw_products, list):
        raise DataFormatError("Invalid products data structure")

    products: list[Product] = []
    for index, raw in enumerate(raw_products):
        if not isinstance(raw, Mapping):
            raise DataFormatError(
                f"product at index {index} is not an object",
                details={"index": index},
            )
        products.append(normalize_product(raw))

    raw_categories = data.get("categories")
    categories: list[Category] = []
    if isinstance(raw_categories, list):
        for raw in raw_categories:
            category = normalize_category(raw)
            if category is not None:
                categories.append(category)

    return products, categories
