"""
In-memory 저장소 (로컬 개발/테스트용).

StorageService와 같은 인터페이스(get/set/delete/health_check)를 제공하여
Redis 없이도 앱을 실행할 수 있게 합니다. TTL은 monotonic 시계 기준으로
조회 시점에 lazy하게 만료 처리합니다.
"""

from __future__ import annotations

import time
from typing import Callable, Dict, Optional, Tuple


class MemoryStorageService:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        # key -> (value, expires_at or None)
        self._store: Dict[str, Tuple[str, Optional[float]]] = {}
        self._clock = clock

    def get(self, key: str) -> Optional[str]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        expires_at = self._clock() + ttl if ttl else None
        self._store[key] = (value, expires_at)
        return True

    def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def health_check(self) -> bool:
        return True
