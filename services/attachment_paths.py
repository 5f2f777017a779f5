"""Strict validation of attachment URL segments before touching the filesystem."""

from __future__ import annotations

import re
from pathlib import Path

from services.errors import MessageValidationError

MESSAGE_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
SUBDIR_PATTERN = re.compile(r"^[a-z]+$")
FILENAME_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\.[a-z0-9]{2,5}$",
    re.IGNORECASE,
)


def is_message_id(value: str) -> bool:
    return bool(value) and MESSAGE_ID_PATTERN.fullmatch(value) is not None


def validate_segments(message_id: str, subdir: str, filename: str) -> None:
    """Raise MessageValidationError unless all three segments match their patterns."""
    if not is_message_id(message_id):
        raise MessageValidationError("Invalid message id")
    if not subdir or SUBDIR_PATTERN.fullmatch(subdir) is None:
        raise MessageValidationError("Invalid attachment directory")
    if not filename or FILENAME_PATTERN.fullmatch(filename) is None:
        raise MessageValidationError("Invalid attachment filename")


def resolve_attachment_path(uploads_root: Path, message_id: str, subdir: str, filename: str) -> Path:
    """Validate the segments, then build the on-disk path under ``uploads_root``.

    No filesystem call happens before the patterns are checked.
    """
    validate_segments(message_id, subdir, filename)
    return Path(uploads_root) / message_id / subdir / filename
