"""
Storage Module

File storage abstraction. The active backend is picked from the
STORAGE_BACKEND setting; business code only sees ``StorageBackend``.
"""

from typing import Optional

from app.storage.base import (
    StorageBackend,
    StoredFile,
    StorageError,
    FileNotFoundError,
)
from app.storage.local import LocalStorage
from app.core.config import settings

_storage_instance: Optional[StorageBackend] = None


def get_storage() -> StorageBackend:
    """
    Return the configured storage backend, creating it on first use.

    Raises:
        ValueError: If STORAGE_BACKEND is not a valid option
    """
    global _storage_instance

    if _storage_instance is None:
        _storage_instance = _create_storage_backend()

    return _storage_instance


def _create_storage_backend() -> StorageBackend:
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "local":
        return LocalStorage(base_path=settings.UPLOAD_DIR)

    raise ValueError(
        f"Unknown storage backend: {backend}. Valid options: local"
    )


__all__ = [
    "get_storage",
    "StorageBackend",
    "StoredFile",
    "StorageError",
    "FileNotFoundError",
    "LocalStorage",
]
