"""저장소 서비스 - export only."""

from typing import Union

from storefront.core.config import Settings

from .impl import MemoryStorageService, StorageService

StorageBackend = Union[StorageService, MemoryStorageService]


def create_storage_backend(settings: Settings) -> StorageBackend:
    """설정에 맞는 저장소 백엔드 생성"""
    if settings.storage_backend == "memory":
        return MemoryStorageService()
    return StorageService(settings.redis_url)


__all__ = ["MemoryStorageService", "StorageService", "StorageBackend", "create_storage_backend"]
