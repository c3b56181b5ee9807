"""Cart Events - 타입이 있는 publish/subscribe

이벤트 종류는 CartEventKind로 닫혀 있으며, 각 이벤트는 전용 payload dataclass를 가집니다.
디스패치는 상태 변경(및 저장) 직후 동기적으로 수행됩니다.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from storefront.core.logging import logger
from storefront.schemas.cart_schema import CartItem, ValidationReport
from storefront.schemas.catalog_schema import Product


class CartEventKind(str, Enum):
    """장바구니 이벤트 종류"""

    ADDED = "add"
    REMOVED = "remove"
    UPDATED = "update"
    CLEARED = "clear"
    MERGED = "merge"
    IMPORTED = "import"
    VALIDATED = "validation"


@dataclass(frozen=True)
class ItemAdded:
    product_id: str
    quantity: int  # 이번에 추가된 수량
    product: Product


@dataclass(frozen=True)
class ItemRemoved:
    product_id: str
    removed_item: CartItem


@dataclass(frozen=True)
class QuantityUpdated:
    product_id: str
    quantity: int  # 변경 후 수량


@dataclass(frozen=True)
class CartCleared:
    removed_count: int = 0


@dataclass(frozen=True)
class CartMerged:
    updated_ids: list[str] = field(default_factory=list)
    added_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CartImported:
    item_count: int = 0


@dataclass(frozen=True)
class CartValidated:
    report: ValidationReport


CartEventPayload = Union[
    ItemAdded, ItemRemoved, QuantityUpdated, CartCleared, CartMerged, CartImported, CartValidated
]


@dataclass(frozen=True)
class CartEvent:
    """이벤트 = 종류 + payload"""

    kind: CartEventKind
    payload: CartEventPayload


CartListener = Callable[[CartEvent], None]


class EventNotifier:
    """동기 이벤트 디스패처

    kind=None으로 구독하면 모든 이벤트를 받습니다.
    리스너 예외는 로깅만 하고 다른 리스너/상태 변경에는 영향을 주지 않습니다.
    """

    def __init__(self) -> None:
        self._listeners: list[tuple[Optional[CartEventKind], CartListener]] = []

    def subscribe(
        self, callback: CartListener, kind: Optional[CartEventKind] = None
    ) -> Callable[[], None]:
        """리스너 등록

        Returns:
            등록 해제 함수
        """
        entry = (kind, callback)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def unsubscribe(self, callback: CartListener, kind: Optional[CartEventKind] = None) -> None:
        self._listeners = [
            (k, cb) for k, cb in self._listeners if not (k == kind and cb == callback)
        ]

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, kind: CartEventKind, payload: CartEventPayload) -> CartEvent:
        event = CartEvent(kind=kind, payload=payload)
        for listen_kind, callback in list(self._listeners):
            if listen_kind is not None and listen_kind != kind:
                continue
            try:
                callback(event)
            except Exception:
                logger.exception(f"Error in cart event listener: kind={kind.value}")
        return event
