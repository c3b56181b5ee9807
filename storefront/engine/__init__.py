"""Engine Layer - Catalog Query Engine and Cart Consistency Engine

This module provides the core engine layer of the storefront:
- CatalogStore: normalized catalog with a 24h storage-backed cache
- Query functions: search / filter / sort / paginate / facets
- Cart: persisted line items with validation against the live catalog
- CartValidator: reconciliation of cart lines against stock/existence
- EventNotifier: typed cart events
- StorageAdapter: async JSON persistence over a key/value backend
"""

from .cart import Cart
from .cart_validator import CartValidator
from .catalog import CatalogStore
from .events import (
    CartCleared,
    CartEvent,
    CartEventKind,
    CartImported,
    CartMerged,
    CartValidated,
    EventNotifier,
    ItemAdded,
    ItemRemoved,
    QuantityUpdated,
)
from .normalization import normalize_feed, normalize_product
from .query import (
    FilterCriteria,
    Page,
    compute_facets,
    compute_price_range,
    filter_products,
    paginate,
    search_products,
    sort_products,
)
from .storage_adapter import StorageAdapter

__all__ = [
    "Cart",
    "CartValidator",
    "CatalogStore",
    "StorageAdapter",
    # Events
    "EventNotifier",
    "CartEvent",
    "CartEventKind",
    "ItemAdded",
    "ItemRemoved",
    "QuantityUpdated",
    "CartCleared",
    "CartMerged",
    "CartImported",
    "CartValidated",
    # Query
    "FilterCriteria",
    "Page",
    "search_products",
    "filter_products",
    "sort_products",
    "paginate",
    "compute_facets",
    "compute_price_range",
    # Normalization
    "normalize_feed",
    "normalize_product",
]
