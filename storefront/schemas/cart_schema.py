"""장바구니 Pydantic 스키마

영속 레코드 형식:
    {"items": [CartItem, ...], "savedAt": ISO-8601}
"""
from datetime import datetime
from typing import Optional, Union

from pydantic import Field

from storefront.schemas.base import CamelModel
from storefront.schemas.catalog_schema import Product


CART_EXPORT_VERSION = "1.0"


class ProductSnapshot(CamelModel):
    """담을 당시의 상품 정보 (카탈로그에서 사라졌을 때 표시용)"""
    id: str
    name: str = "Unknown Product"
    price: float = 0.0
    images: list[str] = Field(default_factory=list)
    category: str = ""
    in_stock: bool = False

    @classmethod
    def from_product(cls, product: Product) -> "ProductSnapshot":
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            images=list(product.images),
            category=product.category,
            in_stock=product.in_stock,
        )


class CartItem(CamelModel):
    """장바구니 항목 (product_id 기준으로 유일)"""
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    added_at: datetime
    updated_at: datetime
    snapshot_product: Optional[ProductSnapshot] = None


class CartRecord(CamelModel):
    """저장소에 보관되는 장바구니 레코드"""
    items: list[CartItem] = Field(default_factory=list)
    saved_at: datetime


class CartExport(CamelModel):
    """백업/이관용 내보내기 형식"""
    items: list[CartItem] = Field(default_factory=list)
    exported_at: datetime
    version: str = CART_EXPORT_VERSION


class CartLine(CamelModel):
    """카탈로그와 조인된 장바구니 항목"""
    product_id: str
    quantity: int
    added_at: datetime
    updated_at: datetime
    product: Union[Product, ProductSnapshot]
    subtotal: float
    in_stock: bool
    from_snapshot: bool = False


class CartSummary(CamelModel):
    """장바구니 합계 (금액은 집계 시점에 반올림)"""
    subtotal: float = 0.0
    tax_amount: float = 0.0
    shipping_cost: float = 0.0
    total: float = 0.0
    item_count: int = 0
    line_count: int = 0
    free_shipping_eligible: bool = False
    free_shipping_remaining: float = 0.0


class InvalidItem(CamelModel):
    """카탈로그에서 사라진 항목"""
    id: str
    name: str
    reason: str = "Product no longer available"


class OutOfStockItem(CamelModel):
    """품절로 제거된 항목"""
    id: str
    name: str
    current_quantity: int


class UpdatedItem(CamelModel):
    """재고에 맞춰 수량이 조정된 항목"""
    id: str
    name: str
    old_quantity: int
    new_quantity: int


class ValidationReport(CamelModel):
    """장바구니 재조정 리포트"""
    is_valid: bool = True
    invalid_items: list[InvalidItem] = Field(default_factory=list)
    out_of_stock_items: list[OutOfStockItem] = Field(default_factory=list)
    updated_items: list[UpdatedItem] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.invalid_items or self.out_of_stock_items or self.updated_items)


class StorageInfo(CamelModel):
    """저장된 장바구니 레코드 정보"""
    size: int = 0
    items: int = 0
    last_saved: Optional[str] = None
    error: Optional[str] = None


class MergeLine(CamelModel):
    """병합 입력 항목 (다른 탭/기기의 장바구니 스냅샷)

    added_at/updated_at 등 나머지 필드는 무시하고 병합 시각으로 새로 기록합니다.
    """
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    snapshot_product: Optional[ProductSnapshot] = None
