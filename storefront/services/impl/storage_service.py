"""Redis 저장소 서비스 - 키/값 저장만 담당"""
from typing import Optional
from redis import Redis

from storefront.core.logging import logger
from storefront.core.exceptions import StorageConnectionError


class StorageService:
    """Redis 키/값 저장소

    값은 직렬화된 문자열로 저장하며 JSON 해석은 StorageAdapter가 담당합니다.
    """

    def __init__(self, redis_url: str):
        """Redis 클라이언트 초기화"""
        try:
            self.redis_client = Redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            # 연결 테스트
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise StorageConnectionError(
                reason="Redis connection failed",
                details={"error": str(e)}
            )

    def get(self, key: str) -> Optional[str]:
        """
        값 조회

        Args:
            key: 저장소 키

        Returns:
            저장된 문자열 또는 None
        """
        try:
            value = self.redis_client.get(key)
        except Exception as e:
            logger.error(f"Storage read error: {e}")
            raise StorageConnectionError(
                reason="Storage read failed",
                details={"key": key, "error": str(e)}
            )

        if value is None:
            logger.debug(f"Storage miss for key: {key}")
        return value

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """
        값 저장

        Args:
            key: 저장소 키
            value: 직렬화된 값
            ttl: 만료 시간 (초), None이면 만료 없음

        Returns:
            성공 여부
        """
        try:
            if ttl:
                self.redis_client.setex(key, ttl, value)
            else:
                self.redis_client.set(key, value)
            logger.debug(f"Storage set for key: {key}, TTL: {ttl}")
            return True
        except Exception as e:
            logger.error(f"Storage write error: {e}")
            raise StorageConnectionError(
                reason="Storage write failed",
                details={"key": key, "error": str(e)}
            )

    def delete(self, key: str) -> bool:
        """값 삭제"""
        try:
            result = self.redis_client.delete(key)
            logger.info(f"Storage deleted for key: {key}")
            return result > 0
        except Exception as e:
            logger.error(f"Storage delete error: {e}")
            return False

    def health_check(self) -> bool:
        """Redis 연결 상태 확인"""
        try:
            self.redis_client.ping()
            return True
        except Exception:
            return False
