"""
Media Service

Keeps uploaded files in step with the records that reference them.

Callers follow a two-phase sequence:

1. ``store_upload`` saves the new file before the record changes.
2. The record update is committed. On failure the caller calls
   ``discard_upload`` for the new file.
3. Only after the commit, ``replace`` / ``delete_all`` remove the
   file that is no longer referenced.

If a step fails, the worst outcome is an orphaned file on disk. A
record never points at a file that was already deleted. The shared
placeholder of a slot is never deleted.
"""

import logging
from typing import Optional

from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import InvalidUploadError
from app.schemas.media import AssetKind, AssetSlot
from app.storage import StorageBackend, StorageError, get_storage
from app.utils.file_utils import generate_asset_reference, validate_asset

logger = logging.getLogger(__name__)


def profile_slot() -> AssetSlot:
    """Profile pictures, with the configured placeholder."""
    return AssetSlot(
        folder="profile",
        kind=AssetKind.IMAGE,
        placeholder=settings.DEFAULT_PROFILE_ASSET,
    )


class MediaService:
    """Stores uploads and garbage-collects replaced or orphaned assets."""

    def __init__(self, storage: Optional[StorageBackend] = None):
        self.storage = storage or get_storage()

    @staticmethod
    def is_placeholder(slot: AssetSlot, reference: Optional[str]) -> bool:
        return slot.placeholder is not None and reference == slot.placeholder

    # ============================================================
    # Phase 1: store the new file
    # ============================================================
    async def store_upload(self, slot: AssetSlot, upload: Optional[UploadFile]) -> Optional[str]:
        """
        Validate and save an optional upload.

        Returns:
            The new asset reference, or None when nothing was uploaded

        Raises:
            InvalidUploadError: wrong content kind, empty or too large
            StorageError: the file could not be written
        """
        if upload is None or not upload.filename:
            return None

        content = await upload.read()
        return await self.store(slot, content, upload.filename)

    async def store(self, slot: AssetSlot, content: bytes, filename: str) -> str:
        validation = validate_asset(content, slot.kind)
        if not validation.is_valid:
            raise InvalidUploadError("; ".join(validation.errors))

        reference = generate_asset_reference(filename)
        await self.storage.save(content, slot.path_for(reference), validation.mime_type)
        return reference

    async def discard_upload(self, slot: AssetSlot, reference: Optional[str]) -> None:
        """Remove a file stored in phase 1 whose record update failed."""
        if reference:
            await self._delete(slot, reference)

    # ============================================================
    # Phase 2: collect what is no longer referenced
    # ============================================================
    async def replace(
        self,
        slot: AssetSlot,
        old_reference: Optional[str],
        new_reference: Optional[str],
    ) -> bool:
        """
        Delete ``old_reference`` now that ``new_reference`` is committed.

        ``old_reference`` must come from the same transaction that
        stored ``new_reference``.

        Returns:
            True if a file was removed
        """
        if not new_reference or not old_reference or old_reference == new_reference:
            return False
        return await self.delete_all(slot, old_reference)

    async def delete_all(self, slot: AssetSlot, reference: Optional[str]) -> bool:
        """
        Delete the asset of a record that was just deleted.

        Placeholders and missing files are left alone.

        Returns:
            True if a file was removed
        """
        if not reference or self.is_placeholder(slot, reference):
            return False
        return await self._delete(slot, reference)

    async def _delete(self, slot: AssetSlot, reference: str) -> bool:
        try:
            return await self.storage.delete(slot.path_for(reference))
        except StorageError as e:
            # The record no longer points here; an orphan is acceptable
            logger.warning(f"Could not delete asset {slot.path_for(reference)}: {e}")
            return False
