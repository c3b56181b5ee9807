"""테스트 자산(데이터) 레이어

규칙:
- 로직 없음 (단순 dict/list/primitive)
- 엔진/네트워크 의존 없음
"""

from .products import CATEGORIES, FEED, PRODUCTS
from .cart_records import (
    CART_EXPORT_WITH_GHOST,
    CART_RECORD_EXPIRED,
    CART_RECORD_FRESH,
    CART_RECORD_WRONG_SHAPE,
    SNAPSHOT_GHOST,
)

__all__ = [
    "FEED",
    "PRODUCTS",
    "CATEGORIES",
    "CART_RECORD_FRESH",
    "CART_RECORD_EXPIRED",
    "CART_RECORD_WRONG_SHAPE",
    "CART_EXPORT_WITH_GHOST",
    "SNAPSHOT_GHOST",
]
