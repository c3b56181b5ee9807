"""장바구니 레코드 테스트 자산

- 저장소에 들어가는 camelCase 레코드 형태 그대로
- 시각은 테스트 시계(2026-01-15T12:00:00Z) 기준
"""

SNAPSHOT_GHOST = {
    "id": "ghost-item",
    "name": "Discontinued Gadget",
    "price": 19.99,
    "images": [],
    "category": "electronics",
    "inStock": True,
}

CART_RECORD_FRESH = {
    "items": [
        {
            "productId": "alpha-phone",
            "quantity": 2,
            "addedAt": "2026-01-14T09:00:00+00:00",
            "updatedAt": "2026-01-14T09:00:00+00:00",
            "snapshotProduct": None,
        },
        {
            "productId": "eta-mug",
            "quantity": 1,
            "addedAt": "2026-01-14T09:05:00+00:00",
            "updatedAt": "2026-01-14T09:05:00+00:00",
            "snapshotProduct": None,
        },
    ],
    "savedAt": "2026-01-14T09:05:00+00:00",
}

# savedAt 31일 전
CART_RECORD_EXPIRED = {
    "items": [
        {
            "productId": "alpha-phone",
            "quantity": 1,
            "addedAt": "2025-12-15T12:00:00+00:00",
            "updatedAt": "2025-12-15T12:00:00+00:00",
        },
    ],
    "savedAt": "2025-12-15T12:00:00+00:00",
}

CART_RECORD_WRONG_SHAPE = {
    "items": "not-a-list",
    "savedAt": "2026-01-14T09:05:00+00:00",
}

CART_EXPORT_WITH_GHOST = {
    "items": [
        {
            "productId": "ghost-item",
            "quantity": 1,
            "addedAt": "2026-01-10T10:00:00+00:00",
            "updatedAt": "2026-01-10T10:00:00+00:00",
            "snapshotProduct": SNAPSHOT_GHOST,
        },
        {
            "productId": "gamma-lamp",
            "quantity": 2,
            "addedAt": "2026-01-10T10:00:00+00:00",
            "updatedAt": "2026-01-10T10:00:00+00:00",
        },
        {
            "productId": "epsilon-headphones",
            "quantity": 6,
            "addedAt": "2026-01-10T10:00:00+00:00",
            "updatedAt": "2026-01-10T10:00:00+00:00",
        },
        {
            "productId": "beta-shirt",
            "quantity": 1,
            "addedAt": "2026-01-10T10:00:00+00:00",
            "updatedAt": "2026-01-10T10:00:00+00:00",
        },
    ],
    "exportedAt": "2026-01-10T10:00:00+00:00",
    "version": "1.0",
}
