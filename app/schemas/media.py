"""
Media Schemas

Asset kinds, slots and upload validation results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class AssetKind(str, Enum):
    """What kind of content a slot accepts."""
    IMAGE = "image"
    VIDEO = "video"


# Detected MIME type → kind
MIME_TYPE_MAPPING: dict[str, AssetKind] = {
    "image/jpeg": AssetKind.IMAGE,
    "image/png": AssetKind.IMAGE,
    "image/gif": AssetKind.IMAGE,
    "image/webp": AssetKind.IMAGE,
    "image/heic": AssetKind.IMAGE,
    "video/mp4": AssetKind.VIDEO,
    "video/quicktime": AssetKind.VIDEO,
    "video/x-matroska": AssetKind.VIDEO,
    "video/webm": AssetKind.VIDEO,
    "video/x-m4v": AssetKind.VIDEO,
}


def get_kind_from_mime(mime_type: str) -> Optional[AssetKind]:
    return MIME_TYPE_MAPPING.get(mime_type)


@dataclass(frozen=True)
class AssetSlot:
    """
    A place on a record where one uploaded file lives.

    Attributes:
        folder: Storage folder for the slot's files
        kind: Accepted content kind
        placeholder: Shared fallback reference that is never deleted
    """
    folder: str
    kind: AssetKind
    placeholder: Optional[str] = None

    def path_for(self, reference: str) -> str:
        return f"{self.folder}/{reference}"


POSTER_SLOT = AssetSlot(folder="posters", kind=AssetKind.IMAGE)
VIDEO_SLOT = AssetSlot(folder="videos", kind=AssetKind.VIDEO)


class FileValidationResult(BaseModel):
    """Result of validating an uploaded file."""
    is_valid: bool
    kind: Optional[AssetKind] = None
    mime_type: Optional[str] = None
    file_size: int
    errors: List[str] = Field(default_factory=list)
