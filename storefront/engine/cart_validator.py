"""Cart Validator - 장바구니를 현재 카탈로그 상태와 재조정"""

from datetime import datetime
from typing import Callable, Sequence

from storefront.core.logging import logger
from storefront.schemas.cart_schema import (
    CartItem,
    InvalidItem,
    OutOfStockItem,
    UpdatedItem,
    ValidationReport,
)
from storefront.utils.time_utils import utcnow


class CartValidator:
    """항목별 규칙:

    - 상품이 카탈로그에 없음 -> invalid_items, 제거
    - 품절 -> out_of_stock_items, 제거
    - 수량 > 재고 -> 재고로 수량 조정 (항목 자체를 수정), updated_items
    """

    def __init__(self, catalog, clock: Callable[[], datetime] = utcnow):
        """
        Args:
            catalog: get_product_by_id 를 제공하는 카탈로그
            clock: 현재 시각 함수
        """
        self.catalog = catalog
        self._clock = clock

    def reconcile(self, items: Sequence[CartItem]) -> tuple[list[CartItem], ValidationReport]:
        """재조정 실행

        Args:
            items: 현재 장바구니 항목

        Returns:
            (남은 항목, 리포트)
        """
        report = ValidationReport()
        valid_items: list[CartItem] = []

        for item in items:
            product = self.catalog.get_product_by_id(item.product_id)

            if product is None:
                name = item.snapshot_product.name if item.snapshot_product else "Unknown Product"
                report.invalid_items.append(InvalidItem(id=item.product_id, name=name))
                continue

            if not product.in_stock:
                report.out_of_stock_items.append(
                    OutOfStockItem(id=item.product_id, name=product.name, current_quantity=item.quantity)
                )
                continue

            if item.quantity > product.stock:
                report.updated_items.append(
                    UpdatedItem(
                        id=item.product_id,
                        name=product.name,
                        old_quantity=item.quantity,
                        new_quantity=product.stock,
                    )
                )
                item.quantity = product.stock
                item.updated_at = self._clock()

            valid_items.append(item)

        report.is_valid = not (report.invalid_items or report.out_of_stock_items)

        if report.has_changes:
            logger.info(
                f"Cart reconciled: invalid={len(report.invalid_items)}, "
                f"out_of_stock={len(report.out_of_stock_items)}, updated={len(report.updated_items)}"
            )
        return valid_items, report
