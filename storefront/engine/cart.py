"""Cart - 영속 장바구니 (product_id 기준 유일, 순서 유지)

- 상태 변경은 메모리에서 즉시 반영되고, 저장은 await 가능한 save()로 명시적으로 수행합니다.
- 변경 메서드는 저장 실패를 경고로 낮추고(last_persistence_error) 이벤트를 발행합니다.
- 사용자 의도 오류(CartException)는 항상 호출자에게 전파됩니다.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from storefront.core.config import Settings
from storefront.core.exceptions import (
    CartException,
    DataFormatError,
    FetchError,
    InvalidCartDataError,
    InvalidQuantityError,
    ItemNotFoundError,
    OutOfStockError,
    PersistenceError,
    ProductNotFoundError,
    QuantityLimitError,
    StockExceededError,
    StorageConnectionError,
    StorageCorruptionError,
)
from storefront.core.logging import logger
from storefront.schemas.cart_schema import (
    CartExport,
    CartItem,
    CartLine,
    CartRecord,
    CartSummary,
    MergeLine,
    ProductSnapshot,
    StorageInfo,
    ValidationReport,
)
from storefront.utils.money import round_money
from storefront.utils.time_utils import utcnow

from .cart_validator import CartValidator
from .catalog import CatalogStore
from .events import (
    CartCleared,
    CartEventKind,
    CartImported,
    CartListener,
    CartMerged,
    CartValidated,
    EventNotifier,
    ItemAdded,
    ItemRemoved,
    QuantityUpdated,
)
from .storage_adapter import StorageAdapter


def _is_valid_quantity(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class Cart:
    """장바구니

    Example:
        cart = Cart(catalog, storage, settings)
        await cart.load()
        await cart.add_item("pixel-9", 2)
        summary = cart.get_cart_summary()
    """

    def __init__(
        self,
        catalog: CatalogStore,
        storage: StorageAdapter,
        settings: Optional[Settings] = None,
        notifier: Optional[EventNotifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            catalog: 카탈로그 저장소 (재고/존재 확인)
            storage: 저장소 어댑터
            settings: 설정 (세율/배송비/최대 수량/보관 기간)
            notifier: 이벤트 디스패처 (없으면 내부 생성)
            clock: 현재 시각 함수 (테스트 주입용)
        """
        if catalog is None:
            raise ValueError("catalog must not be None")
        if storage is None:
            raise ValueError("storage must not be None")

        self.catalog = catalog
        self.storage = storage
        self.settings = settings or Settings()
        self.notifier = notifier or EventNotifier()
        self._clock = clock
        self._validator = CartValidator(catalog, clock=clock)

        self.items: list[CartItem] = []
        self.last_persistence_error: Optional[PersistenceError] = None

    @property
    def storage_key(self) -> str:
        return self.settings.cart_storage_key

    @property
    def max_quantity(self) -> int:
        return self.settings.cart_max_quantity

    @property
    def max_age(self) -> timedelta:
        return timedelta(days=self.settings.cart_max_age_days)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def save(self) -> None:
        """현재 항목을 저장

        Raises:
            PersistenceError: 저장 실패
        """
        record = CartRecord(items=self.items, saved_at=self._clock())
        await self.storage.set_json(
            self.storage_key,
            record.to_record(),
            ttl=int(self.max_age.total_seconds()),
        )

    async def _persist(self) -> bool:
        try:
            await self.save()
        except PersistenceError as e:
            logger.warning(f"Failed to save cart to storage: {e}")
            self.last_persistence_error = e
            return False
        self.last_persistence_error = None
        return True

    async def _reset_storage(self) -> None:
        """손상/만료 데이터를 빈 장바구니로 덮어씀"""
        self.items = []
        await self._persist()

    async def load(self, validate: bool = True) -> Optional[ValidationReport]:
        """저장소에서 장바구니 로드

        - 레코드 없음: 빈 장바구니
        - 손상/형식 오류: 로깅 후 빈 장바구니로 초기화하여 저장
        - savedAt 기준 30일 초과: 통째로 폐기 후 빈 장바구니 저장
        - validate=True: 카탈로그와 재조정 (카탈로그 로드 불가 시 생략)

        Returns:
            재조정 리포트 (생략된 경우 None)
        """
        try:
            record = await self.storage.get_json(self.storage_key)
        except StorageCorruptionError as e:
            logger.error(f"Failed to load cart from storage: {e}")
            await self._reset_storage()
            record = None
        except StorageConnectionError as e:
            logger.error(f"Cart storage unavailable: {e}")
            self.items = []
            record = None

        if record is not None:
            self.items = await self._restore(record)
        else:
            self.items = []

        if not validate:
            return None

        try:
            await self.catalog.ensure_loaded()
        except (FetchError, DataFormatError) as e:
            logger.warning(f"Catalog unavailable, skipping cart validation: {e}")
            return None
        return await self.validate_cart()

    async def _restore(self, record: Any) -> list[CartItem]:
        try:
            parsed = CartRecord.model_validate(record)
        except ValidationError as e:
            logger.error(f"Invalid cart data structure, clearing: {e.error_count()} errors")
            await self._reset_storage()
            return []

        saved_at = parsed.saved_at
        if saved_at.tzinfo is None:
            saved_at = saved_at.replace(tzinfo=timezone.utc)
        if self._clock() - saved_at > self.max_age:
            logger.info("Cart data expired, clearing...")
            await self._reset_storage()
            return []

        # product_id 중복 제거 + 최대 수량 제한
        items: list[CartItem] = []
        seen: set[str] = set()
        for item in parsed.items:
            if item.product_id in seen:
                continue
            seen.add(item.product_id)
            item.quantity = min(item.quantity, self.max_quantity)
            items.append(item)
        return items

    async def get_storage_info(self) -> StorageInfo:
        """저장된 레코드의 크기/항목 수/저장 시각"""
        try:
            raw = await self.storage.get_raw(self.storage_key)
        except StorageConnectionError as e:
            return StorageInfo(error=e.message)
        if not raw:
            return StorageInfo()

        size = len(raw.encode("utf-8"))
        try:
            data = json.loads(raw)
            items = data.get("items") if isinstance(data, dict) else None
            return StorageInfo(
                size=size,
                items=len(items) if isinstance(items, list) else 0,
                last_saved=data.get("savedAt") if isinstance(data, dict) else None,
            )
        except (json.JSONDecodeError, ValueError) as e:
            return StorageInfo(size=size, error=str(e))

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, callback: CartListener, kind: Optional[CartEventKind] = None) -> Callable[[], None]:
        """이벤트 구독 (kind=None이면 전체)"""
        return self.notifier.subscribe(callback, kind)

    def unsubscribe(self, callback: CartListener, kind: Optional[CartEventKind] = None) -> None:
        self.notifier.unsubscribe(callback, kind)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def _find(self, product_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def get_item_quantity(self, product_id: str) -> int:
        item = self._find(product_id)
        return item.quantity if item else 0

    def has_item(self, product_id: str) -> bool:
        return self._find(product_id) is not None

    def is_empty(self) -> bool:
        return not self.items

    def get_item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_item(self, product_id: str, quantity: int = 1) -> bool:
        """상품 추가 (기존 항목이 있으면 수량 합산)

        Raises:
            InvalidQuantityError: product_id 누락 또는 quantity < 1
            ProductNotFoundError: 카탈로그에 없는 상품
            OutOfStockError: 품절
            StockExceededError: 기존 + 요청 수량 > 재고
            QuantityLimitError: 기존 + 요청 수량 > 최대 수량
        """
        try:
            if not product_id or not _is_valid_quantity(quantity) or quantity < 1:
                raise InvalidQuantityError(product_id, quantity)

            product = self.catalog.get_product_by_id(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            if not product.in_stock:
                raise OutOfStockError(product_id)

            new_quantity = self.get_item_quantity(product_id) + quantity
            if new_quantity > product.stock:
                raise StockExceededError(product_id, new_quantity, product.stock)
            if new_quantity > self.max_quantity:
                raise QuantityLimitError(product_id, new_quantity, self.max_quantity)
        except CartException as e:
            logger.warning(f"Failed to add item to cart: {e}")
            raise

        now = self._clock()
        existing = self._find(product_id)
        if existing is not None:
            existing.quantity = new_quantity
            existing.updated_at = now
        else:
            self.items.append(
                CartItem(
                    product_id=product.id,
                    quantity=quantity,
                    added_at=now,
                    updated_at=now,
                    snapshot_product=ProductSnapshot.from_product(product),
                )
            )

        await self._persist()
        self.notifier.emit(CartEventKind.ADDED, ItemAdded(product_id, quantity, product))
        return True

    async def remove_item(self, product_id: str, quantity: Optional[int] = None) -> bool:
        """항목 제거

        quantity가 None이거나 현재 수량 이상이면 항목 전체 제거, 아니면 감소.

        Returns:
            False: 장바구니에 없는 상품 (오류 아님)
        """
        if quantity is not None and (not _is_valid_quantity(quantity) or quantity < 1):
            raise InvalidQuantityError(product_id, quantity)

        item = self._find(product_id)
        if item is None:
            return False

        if quantity is None or quantity >= item.quantity:
            self.items.remove(item)
            await self._persist()
            self.notifier.emit(CartEventKind.REMOVED, ItemRemoved(product_id, item))
            return True

        item.quantity -= quantity
        item.updated_at = self._clock()
        await self._persist()
        self.notifier.emit(CartEventKind.UPDATED, QuantityUpdated(product_id, item.quantity))
        return True

    async def update_item_quantity(self, product_id: str, quantity: int) -> bool:
        """수량 변경 (0이면 제거)

        Raises:
            InvalidQuantityError: product_id 누락 또는 quantity < 0
            QuantityLimitError: 최대 수량 초과
            ItemNotFoundError: 장바구니에 없는 항목
            StockExceededError: 재고 초과
        """
        try:
            if not product_id or not _is_valid_quantity(quantity) or quantity < 0:
                raise InvalidQuantityError(product_id, quantity)
            if quantity > self.max_quantity:
                raise QuantityLimitError(product_id, quantity, self.max_quantity)

            item = self._find(product_id)
            if item is None:
                raise ItemNotFoundError(product_id)

            product = self.catalog.get_product_by_id(product_id)
            if product is not None and quantity > product.stock:
                raise StockExceededError(product_id, quantity, product.stock)
        except CartException as e:
            logger.warning(f"Failed to update item quantity: {e}")
            raise

        if quantity == 0:
            return await self.remove_item(product_id)

        item.quantity = quantity
        item.updated_at = self._clock()
        await self._persist()
        self.notifier.emit(CartEventKind.UPDATED, QuantityUpdated(product_id, quantity))
        return True

    async def clear_cart(self) -> None:
        """장바구니 비우기"""
        removed = len(self.items)
        self.items = []
        await self._persist()
        self.notifier.emit(CartEventKind.CLEARED, CartCleared(removed_count=removed))

    def _clamp(self, product_id: str, quantity: int) -> int:
        """최대 수량 + (확인 가능하고 재고가 있으면) 재고로 제한"""
        quantity = min(quantity, self.max_quantity)
        product = self.catalog.get_product_by_id(product_id)
        if product is not None and product.in_stock:
            quantity = min(quantity, product.stock)
        return quantity

    async def merge_cart(self, external_items: Sequence[Union[CartItem, MergeLine, Mapping[str, Any]]]) -> None:
        """다른 스냅샷과 병합

        같은 product_id는 두 수량 중 큰 값(합산 아님), 새 product_id는 뒤에 추가합니다.
        품절/삭제된 상품은 그대로 두고 validate_cart에서 정리합니다.

        Raises:
            InvalidCartDataError: 리스트가 아니거나 항목 형식 오류 (상태 변경 없음)
        """
        if not isinstance(external_items, (list, tuple)):
            raise InvalidCartDataError("merge input must be a list of cart items")

        try:
            incoming = [
                MergeLine(
                    product_id=raw.product_id,
                    quantity=raw.quantity,
                    snapshot_product=raw.snapshot_product,
                )
                if isinstance(raw, (CartItem, MergeLine))
                else MergeLine.model_validate(raw)
                for raw in external_items
            ]
        except ValidationError as e:
            raise InvalidCartDataError(f"{e.error_count()} invalid merge line(s)")

        now = self._clock()
        updated_ids: list[str] = []
        added_ids: list[str] = []

        for line in incoming:
            existing = self._find(line.product_id)
            if existing is not None:
                existing.quantity = self._clamp(line.product_id, max(existing.quantity, line.quantity))
                existing.updated_at = now
                updated_ids.append(line.product_id)
                continue

            snapshot = line.snapshot_product
            if snapshot is None:
                product = self.catalog.get_product_by_id(line.product_id)
                snapshot = ProductSnapshot.from_product(product) if product else None
            self.items.append(
                CartItem(
                    product_id=line.product_id,
                    quantity=self._clamp(line.product_id, line.quantity),
                    added_at=now,
                    updated_at=now,
                    snapshot_product=snapshot,
                )
            )
            added_ids.append(line.product_id)

        await self._persist()
        self.notifier.emit(CartEventKind.MERGED, CartMerged(updated_ids=updated_ids, added_ids=added_ids))

    def export_cart(self) -> dict[str, Any]:
        """백업용 내보내기 (JSON 호환 dict)"""
        return CartExport(items=self.items, exported_at=self._clock()).to_record()

    async def import_cart(self, cart_data: Union[CartExport, Mapping[str, Any]]) -> bool:
        """전체 항목을 원자적으로 교체

        확인 가능하고 재고가 있는 상품은 수량을 현재 재고로 제한합니다.

        Raises:
            InvalidCartDataError: items 누락/형식 오류/중복 ID/수량 범위 오류 (기존 상태 유지)
        """
        if isinstance(cart_data, CartExport):
            cart_data = cart_data.to_record()
        if not isinstance(cart_data, Mapping) or not isinstance(cart_data.get("items"), list):
            raise InvalidCartDataError("items must be a list")

        try:
            items = [CartItem.model_validate(raw) for raw in cart_data["items"]]
        except ValidationError as e:
            raise InvalidCartDataError(f"{e.error_count()} invalid cart line(s)")

        product_ids = [item.product_id for item in items]
        if len(set(product_ids)) != len(product_ids):
            raise InvalidCartDataError("duplicate product ids")
        over_limit = [item.product_id for item in items if item.quantity > self.max_quantity]
        if over_limit:
            raise InvalidCartDataError(
                f"quantity exceeds {self.max_quantity}", details={"product_ids": over_limit}
            )

        for item in items:
            item.quantity = self._clamp(item.product_id, item.quantity)

        self.items = items
        await self._persist()
        self.notifier.emit(CartEventKind.IMPORTED, CartImported(item_count=len(items)))
        return True

    async def validate_cart(self) -> ValidationReport:
        """카탈로그와 재조정 (로드 시/결제 전)

        재조정 후 상태는 리포트 확인 여부와 관계없이 항상 저장됩니다.
        """
        await self.catalog.ensure_loaded()

        self.items, report = self._validator.reconcile(self.items)
        await self._persist()

        if report.has_changes:
            self.notifier.emit(CartEventKind.VALIDATED, CartValidated(report))
        return report

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_cart_items(self) -> list[CartLine]:
        """카탈로그와 조인된 항목 (상품이 사라졌으면 스냅샷 사용)"""
        lines: list[CartLine] = []
        for item in self.items:
            product = self.catalog.get_product_by_id(item.product_id)
            from_snapshot = False
            if product is None and item.snapshot_product is not None:
                product = item.snapshot_product
                from_snapshot = True
            if product is None:
                continue

            lines.append(
                CartLine(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    added_at=item.added_at,
                    updated_at=item.updated_at,
                    product=product,
                    subtotal=item.quantity * product.price,
                    in_stock=product.in_stock,
                    from_snapshot=from_snapshot,
                )
            )
        return lines

    def get_cart_summary(self) -> CartSummary:
        """합계 계산 (금액 반올림은 집계 시점에만)"""
        lines = self.get_cart_items()
        subtotal = sum(line.subtotal for line in lines)
        threshold = self.settings.shipping_threshold

        shipping_cost = 0.0 if subtotal >= threshold else self.settings.shipping_cost
        tax_amount = subtotal * self.settings.tax_rate
        total = subtotal + shipping_cost + tax_amount

        return CartSummary(
            subtotal=round_money(subtotal),
            tax_amount=round_money(tax_amount),
            shipping_cost=round_money(shipping_cost),
            total=round_money(total),
            item_count=sum(line.quantity for line in lines),
            line_count=len(lines),
            free_shipping_eligible=subtotal >= threshold,
            free_shipping_remaining=round_money(max(0.0, threshold - subtotal)),
        )
