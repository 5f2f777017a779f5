"""Classification table for accepted upload types."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class FileTypeGroup(BaseModel):
    """One MIME family and the storage subdirectory it maps to."""

    model_config = ConfigDict(frozen=True)

    prefix: str
    specific_types: Tuple[str, ...]
    subdir: str


FILE_TYPE_CONFIG: Tuple[FileTypeGroup, ...] = (
    FileTypeGroup(
        prefix="image/",
        specific_types=("image/jpeg", "image/png", "image/gif", "image/webp"),
        subdir="images",
    ),
    FileTypeGroup(prefix="video/", specific_types=("video/mp4",), subdir="videos"),
    FileTypeGroup(prefix="audio/", specific_types=("audio/mpeg", "audio/wav"), subdir="audios"),
)

ALLOWED_MIME_TYPES = frozenset(mime for group in FILE_TYPE_CONFIG for mime in group.specific_types)

STORAGE_SUBDIRS = frozenset(group.subdir for group in FILE_TYPE_CONFIG)

MIME_TO_EXT: Mapping[str, str] = MappingProxyType(
    {
        "image/jpeg": ".jpg",
        "image/png": ".png",
        "image/gif": ".gif",
        "image/webp": ".webp",
        "video/mp4": ".mp4",
        "audio/mpeg": ".mp3",
        "audio/wav": ".wav",
    }
)

FALLBACK_EXTENSION = ".bin"


def subdirectory_for(mime_type: Optional[str]) -> Optional[str]:
    """Return the storage subdirectory for a verified MIME type, or None."""
    if not mime_type:
        return None
    normalized = mime_type.lower()
    for group in FILE_TYPE_CONFIG:
        if normalized.startswith(group.prefix):
            return group.subdir
    return None


def extension_for(mime_type: Optional[str]) -> str:
    """Return the file extension for a MIME type, ``.bin`` when unknown."""
    if not mime_type:
        return FALLBACK_EXTENSION
    return MIME_TO_EXT.get(mime_type.lower(), FALLBACK_EXTENSION)


def is_allowed(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.lower() in ALLOWED_MIME_TYPES
