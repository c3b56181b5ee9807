"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from typing import Any, Optional


# 기본 예외 클래스
class StorefrontException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 카탈로그 관련 예외
class CatalogException(StorefrontException):
    """카탈로그 관련 예외의 기본 클래스"""
    def __init__(self, message: str, error_code: str = "CATALOG_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CATALOG_ERROR", details)


class FetchError(CatalogException):
    """피드 요청 실패 (네트워크/HTTP/파일)"""
    def __init__(self, source: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Failed to fetch catalog feed from {source}: {reason}"
        super().__init__(message, "FETCH_ERROR",
                         details or {"source": source, "reason": reason})


class DataFormatError(CatalogException):
    """피드 구조가 올바르지 않음"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Invalid catalog data: {reason}"
        super().__init__(message, "DATA_FORMAT_ERROR", details or {"reason": reason})


# 장바구니 관련 예외 (사용자 의도 오류 - 항상 호출자에게 전달)
class CartException(StorefrontException):
    """장바구니 관련 예외의 기본 클래스"""
    def __init__(self, message: str, error_code: str = "CART_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CART_ERROR", details)


class ProductNotFoundError(CartException):
    """카탈로그에 없는 상품"""
    def __init__(self, product_id: str, details: Optional[dict[str, Any]] = None):
        message = f"Product not found: {product_id}"
        super().__init__(message, "PRODUCT_NOT_FOUND", details or {"product_id": product_id})


class OutOfStockError(CartException):
    """재고 없음"""
    def __init__(self, product_id: str, details: Optional[dict[str, Any]] = None):
        message = f"Product is out of stock: {product_id}"
        super().__init__(message, "OUT_OF_STOCK", details or {"product_id": product_id})


class StockExceededError(CartException):
    """요청 수량이 재고를 초과"""
    def __init__(self, product_id: str, requested: int, available: int, details: Optional[dict[str, Any]] = None):
        message = f"Only {available} items available in stock"
        super().__init__(message, "STOCK_EXCEEDED",
                         details or {"product_id": product_id, "requested": requested, "available": available})


class QuantityLimitError(CartException):
    """상품당 최대 수량 초과"""
    def __init__(self, product_id: str, requested: int, limit: int, details: Optional[dict[str, Any]] = None):
        message = f"Maximum quantity per item is {limit}"
        super().__init__(message, "QUANTITY_LIMIT",
                         details or {"product_id": product_id, "requested": requested, "limit": limit})


class InvalidQuantityError(CartException):
    """유효하지 않은 상품 ID 또는 수량"""
    def __init__(self, product_id: Any, quantity: Any, details: Optional[dict[str, Any]] = None):
        message = f"Invalid product ID or quantity: {product_id!r}, {quantity!r}"
        super().__init__(message, "INVALID_QUANTITY",
                         details or {"product_id": product_id, "quantity": quantity})


class ItemNotFoundError(CartException):
    """장바구니에 없는 항목"""
    def __init__(self, product_id: str, details: Optional[dict[str, Any]] = None):
        message = f"Item not found in cart: {product_id}"
        super().__init__(message, "ITEM_NOT_FOUND", details or {"product_id": product_id})


class InvalidCartDataError(CartException):
    """가져오기/병합 데이터 형식 오류"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Invalid cart data: {reason}"
        super().__init__(message, "INVALID_CART_DATA", details or {"reason": reason})


# 저장소 관련 예외
class StorageException(StorefrontException):
    """저장소 관련 예외"""
    def __init__(self, message: str, error_code: str = "STORAGE_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "STORAGE_ERROR", details)


class StorageConnectionError(StorageException):
    """저장소 연결 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Failed to connect to storage: {reason}"
        super().__init__(message, "STORAGE_CONNECTION_ERROR", details or {"reason": reason})


class StorageCorruptionError(StorageException):
    """저장된 레코드를 해석할 수 없음"""
    def __init__(self, key: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Stored record '{key}' is corrupted: {reason}"
        super().__init__(message, "STORAGE_CORRUPTED", details or {"key": key, "reason": reason})


class PersistenceError(StorageException):
    """저장 실패 (비치명적 경고로 처리)"""
    def __init__(self, key: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Failed to persist '{key}': {reason}"
        super().__init__(message, "PERSISTENCE_ERROR", details or {"key": key, "reason": reason})
