"""
Storage Backend Abstract Base Class

Interface every asset store implements. Business code only talks to
``StorageBackend``, so a bucket-backed store can replace the local one
without touching services.

Paths are always relative to the store root, e.g. ``profile/1712_me.jpg``.
"""
from abc import ABC, abstractmethod
from typing import Optional
from dataclasses import dataclass
from datetime import datetime


@dataclass
class StoredFile:
    """
    Metadata about a stored file, returned by ``save``.

    Attributes:
        path: The storage path where file was saved
        size: File size in bytes
        content_type: MIME type of the file
        stored_at: When the file was stored
    """
    path: str
    size: int
    content_type: str
    stored_at: datetime


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class FileNotFoundError(StorageError):
    """Raised when a requested file doesn't exist."""
    pass


class StorageBackend(ABC):
    """Abstract base class for asset storage backends."""

    @abstractmethod
    async def save(
        self,
        file_content: bytes,
        destination_path: str,
        content_type: Optional[str] = None
    ) -> StoredFile:
        """
        Save file content to storage, creating folders as needed.

        Raises:
            StorageError: If the file cannot be saved
        """

    @abstractmethod
    async def get(self, path: str) -> bytes:
        """
        Retrieve file content.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete a file.

        Idempotent: a missing file is not an error.

        Returns:
            True if a file was removed, False if it didn't exist

        Raises:
            StorageError: If deletion fails (permission error, etc.)
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a file exists."""
