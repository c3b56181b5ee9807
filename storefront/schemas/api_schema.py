"""HTTP 요청/응답 스키마"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from storefront.schemas.base import CamelModel
from storefront.schemas.cart_schema import CartLine, CartSummary


class ApiResponse(BaseModel):
    """공통 응답 envelope"""
    status: str = Field(..., description="success or fail")
    data: Optional[Any] = Field(None, description="응답 데이터")
    message: str = Field("", description="응답 메시지")
    error_code: str | None = Field(None, description="에러 코드 (fail 시)")


class AddItemRequest(CamelModel):
    """장바구니 추가 요청"""
    product_id: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(1, description="추가 수량")


class UpdateQuantityRequest(CamelModel):
    """수량 변경 요청"""
    quantity: int = Field(..., description="변경할 수량 (0이면 제거)")


class MergeCartRequest(CamelModel):
    """병합 요청"""
    items: list[dict[str, Any]] = Field(default_factory=list)


class CartView(CamelModel):
    """장바구니 조회 응답"""
    items: list[CartLine] = Field(default_factory=list)
    summary: CartSummary = Field(default_factory=CartSummary)


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str
    timestamp: datetime
    version: str
    storage_ok: bool
    catalog_loaded: bool
    cache_valid: bool
