"""
File Utilities

Helper functions for upload naming and validation.
Always assume user input is malicious!
"""

import os
import re
import time
import logging
from typing import Optional, Tuple

import filetype

from app.core.config import settings
from app.schemas.media import AssetKind, FileValidationResult, get_kind_from_mime

logger = logging.getLogger(__name__)


# ============================================================
# MIME TYPE DETECTION
# ============================================================
def detect_mime_type(file_content: bytes) -> Optional[str]:
    """
    Detect the actual MIME type of a file by reading its magic bytes.

    Uses the pure-Python ``filetype`` library so no system
    dependencies (libmagic) are needed.
    """
    kind = filetype.guess(file_content)
    return kind.mime if kind is not None else None


# ============================================================
# FILENAME HANDLING
# ============================================================

def sanitize_filename(filename: str) -> str:
    """
    Remove dangerous characters from a filename.
    """
    # Remove path components (user might include full path)
    filename = os.path.basename(filename or "")

    # Remove null bytes
    filename = filename.replace("\x00", "")

    # \w is Unicode-aware; also allow hyphen and dot
    filename = re.sub(r'[^\w\-.]', '_', filename)
    filename = re.sub(r'_+', '_', filename)
    filename = filename.strip('_.')

    if len(filename) > 200:
        name, ext = os.path.splitext(filename)
        filename = name[:200 - len(ext)] + ext

    if not filename:
        filename = "unnamed_file"

    return filename


def generate_asset_reference(original_filename: str) -> str:
    """
    Build the stored name for an upload: ``<epoch millis>_<sanitized name>``.

    Example:
        generate_asset_reference("my photo.jpg")  # "1712345678901_my_photo.jpg"
    """
    return f"{int(time.time() * 1000)}_{sanitize_filename(original_filename)}"


# ============================================================
# FILE VALIDATION
# ============================================================

def validate_file_size(file_size: int) -> Tuple[bool, Optional[str]]:
    """
    Validate file size against configured maximum.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if file_size <= 0:
        return False, "File is empty"

    if file_size > settings.MAX_FILE_SIZE_BYTES:
        size_mb = file_size / (1024 * 1024)
        return False, f"File size ({size_mb:.1f} MB) exceeds maximum ({settings.MAX_FILE_SIZE_MB} MB)"

    return True, None


def validate_asset(file_content: bytes, expected_kind: AssetKind) -> FileValidationResult:
    """
    Check an upload's size and that its content matches the slot kind.

    The declared extension and content type are ignored; only the
    magic bytes count.
    """
    errors = []
    file_size = len(file_content)

    size_valid, size_error = validate_file_size(file_size)
    if not size_valid:
        errors.append(size_error)

    mime_type = detect_mime_type(file_content) if file_size else None
    kind = get_kind_from_mime(mime_type) if mime_type else None

    if file_size and kind != expected_kind:
        errors.append(
            f"File content type '{mime_type or 'unknown'}' is not an accepted {expected_kind.value}"
        )

    return FileValidationResult(
        is_valid=not errors,
        kind=kind,
        mime_type=mime_type,
        file_size=file_size,
        errors=errors,
    )
