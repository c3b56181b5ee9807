"""CartValidator 단위 테스트 (카탈로그는 Mock)"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

from storefront.engine import CartValidator
from storefront.engine.normalization import normalize_product
from storefront.schemas.cart_schema import CartItem, ProductSnapshot

ADDED = datetime(2026, 1, 1, tzinfo=timezone.utc)
NOW = datetime(2026, 1, 15, tzinfo=timezone.utc)


def _catalog(*raw_products):
    products = {p["id"]: normalize_product(p) for p in raw_products}
    catalog = MagicMock()
    catalog.get_product_by_id.side_effect = products.get
    return catalog


def _item(product_id, quantity, snapshot_name=None):
    snapshot = ProductSnapshot(id=product_id, name=snapshot_name) if snapshot_name else None
    return CartItem(
        product_id=product_id,
        quantity=quantity,
        added_at=ADDED,
        updated_at=ADDED,
        snapshot_product=snapshot,
    )


def test_all_valid():
    validator = CartValidator(_catalog({"id": "a", "stock": 5}), clock=lambda: NOW)
    items, report = validator.reconcile([_item("a", 2)])

    assert [i.quantity for i in items] == [2]
    assert report.is_valid is True
    assert report.has_changes is False


def test_missing_product_uses_snapshot_name():
    validator = CartValidator(_catalog(), clock=lambda: NOW)
    items, report = validator.reconcile([_item("gone", 1, snapshot_name="Old Thing"), _item("gone-too", 1)])

    assert items == []
    assert report.is_valid is False
    assert [(i.id, i.name) for i in report.invalid_items] == [
        ("gone", "Old Thing"),
        ("gone-too", "Unknown Product"),
    ]
    assert report.invalid_items[0].reason == "Product no longer available"


def test_out_of_stock_removed():
    validator = CartValidator(_catalog({"id": "a", "name": "A", "stock": 0}), clock=lambda: NOW)
    items, report = validator.reconcile([_item("a", 3)])

    assert items == []
    assert report.is_valid is False
    assert report.out_of_stock_items[0].current_quantity == 3


def test_quantity_clamped_to_stock():
    validator = CartValidator(_catalog({"id": "a", "name": "A", "stock": 2}), clock=lambda: NOW)
    item = _item("a", 7)

    items, report = validator.reconcile([item])

    assert items == [item]
    assert item.quantity == 2
    assert item.updated_at == NOW
    assert report.is_valid is True
    assert report.updated_items[0].old_quantity == 7
    assert report.updated_items[0].new_quantity == 2


def test_order_preserved():
    validator = CartValidator(
        _catalog({"id": "a", "stock": 5}, {"id": "b", "stock": 0}, {"id": "c", "stock": 5}),
        clock=lambda: NOW,
    )
    items, _ = validator.reconcile([_item("c", 1), _item("b", 1), _item("a", 1)])
    assert [i.product_id for i in items] == ["c", "a"]
