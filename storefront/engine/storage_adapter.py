"""Storage Adapter - JSON 레코드 영속화 (TTL 지원)"""

import json
from typing import Any, Optional

from storefront.core.logging import logger
from storefront.core.exceptions import (
    PersistenceError,
    StorageConnectionError,
    StorageCorruptionError,
)


class StorageAdapter:
    """저장소 어댑터

    동기 저장소 백엔드(StorageService / MemoryStorageService)를
    카탈로그와 장바구니가 기대하는 async JSON 인터페이스로 변환합니다.

    - 읽기 실패(연결)는 StorageConnectionError
    - 해석 불가한 레코드는 StorageCorruptionError
    - 쓰기 실패는 PersistenceError
    """

    def __init__(self, backend):
        """
        Args:
            backend: get/set/delete/health_check 를 구현한 저장소 백엔드

        Raises:
            ValueError: backend가 None인 경우
        """
        if backend is None:
            raise ValueError("backend must not be None")
        self.backend = backend

    async def get_json(self, key: str) -> Optional[Any]:
        """레코드 조회

        Args:
            key: 저장소 키

        Returns:
            역직렬화된 값 또는 None (키 없음)

        Raises:
            StorageCorruptionError: JSON으로 해석할 수 없는 경우
            StorageConnectionError: 백엔드 읽기 실패
        """
        raw = self.backend.get(key)
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            logger.warning(f"Stored record is not valid JSON: key={key}, error={type(e).__name__}")
            raise StorageCorruptionError(key=key, reason=str(e))

    async def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """레코드 저장

        Args:
            key: 저장소 키
            value: JSON 직렬화 가능한 값
            ttl: 만료 시간 (초)

        Raises:
            PersistenceError: 직렬화 또는 쓰기 실패
        """
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize record: key={key}, error={e}")
            raise PersistenceError(key=key, reason=f"serialization failed: {e}")

        try:
            self.backend.set(key, payload, ttl)
        except StorageConnectionError as e:
            raise PersistenceError(key=key, reason=e.message, details=e.details)

    async def get_raw(self, key: str) -> Optional[str]:
        """직렬화된 원문 조회 (크기 계산용)"""
        return self.backend.get(key)

    async def delete(self, key: str) -> bool:
        """레코드 삭제"""
        return self.backend.delete(key)

    def health_check(self) -> bool:
        """백엔드 상태 확인"""
        try:
            return bool(self.backend.health_check())
        except Exception as e:
            logger.warning(f"Storage health check failed: {type(e).__name__}: {e}")
            return False
