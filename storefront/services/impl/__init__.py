"""Services implementation package."""

from .memory_storage import MemoryStorageService
from .storage_service import StorageService

__all__ = ["MemoryStorageService", "StorageService"]
