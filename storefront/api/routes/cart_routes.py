"""Cart Routes - 장바구니 조작

사용자 의도 오류(CartException)는 앱 레벨 예외 핸들러가 ApiResponse로 변환합니다.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends

from storefront.api.routes.dependencies import get_cart
from storefront.core.exceptions import ItemNotFoundError
from storefront.engine import Cart
from storefront.schemas.api_schema import (
    AddItemRequest,
    ApiResponse,
    CartView,
    MergeCartRequest,
    UpdateQuantityRequest,
)

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


def _cart_view(cart: Cart) -> dict[str, Any]:
    return CartView(items=cart.get_cart_items(), summary=cart.get_cart_summary()).to_record()


def _persistence_message(cart: Cart) -> str:
    if cart.last_persistence_error is not None:
        return f"Cart updated but not saved: {cart.last_persistence_error.message}"
    return ""


@router.get("")
async def view_cart(cart: Cart = Depends(get_cart)):
    """장바구니 항목 + 합계"""
    return ApiResponse(status="success", data=_cart_view(cart))


@router.post("/items")
async def add_item(request: AddItemRequest, cart: Cart = Depends(get_cart)):
    await cart.catalog.ensure_loaded()
    await cart.add_item(request.product_id, request.quantity)
    return ApiResponse(status="success", data=_cart_view(cart), message=_persistence_message(cart))


@router.patch("/items/{product_id}")
async def update_item(product_id: str, request: UpdateQuantityRequest, cart: Cart = Depends(get_cart)):
    """수량 변경 (0이면 제거)"""
    await cart.update_item_quantity(product_id, request.quantity)
    return ApiResponse(status="success", data=_cart_view(cart), message=_persistence_message(cart))


@router.delete("/items/{product_id}")
async def remove_item(product_id: str, quantity: int | None = None, cart: Cart = Depends(get_cart)):
    """항목 제거 (quantity 지정 시 해당 수량만 감소)

    Raises:
        ItemNotFoundError: 장바구니에 없는 항목 (404)
    """
    removed = await cart.remove_item(product_id, quantity)
    if not removed:
        raise ItemNotFoundError(product_id)
    return ApiResponse(status="success", data=_cart_view(cart), message=_persistence_message(cart))


@router.delete("")
async def clear_cart(cart: Cart = Depends(get_cart)):
    await cart.clear_cart()
    return ApiResponse(status="success", data=_cart_view(cart), message=_persistence_message(cart))


@router.post("/merge")
async def merge_cart(request: MergeCartRequest, cart: Cart = Depends(get_cart)):
    """다른 탭/기기의 장바구니와 병합 (같은 상품은 큰 수량)"""
    await cart.merge_cart(request.items)
    return ApiResponse(status="success", data=_cart_view(cart), message=_persistence_message(cart))


@router.get("/export")
async def export_cart(cart: Cart = Depends(get_cart)):
    return ApiResponse(status="success", data=cart.export_cart())


@router.post("/import")
async def import_cart(payload: dict[str, Any] = Body(...), cart: Cart = Depends(get_cart)):
    """내보낸 장바구니로 전체 교체 (검증 실패 시 기존 상태 유지)"""
    await cart.import_cart(payload)
    return ApiResponse(status="success", data=_cart_view(cart), message=_persistence_message(cart))


@router.post("/validate")
async def validate_cart(cart: Cart = Depends(get_cart)):
    """카탈로그와 재조정 후 리포트 반환"""
    report = await cart.validate_cart()
    return ApiResponse(
        status="success",
        data={"report": report.to_record(), "cart": _cart_view(cart)},
    )
