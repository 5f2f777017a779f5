"""Content-based file type detection for uploaded attachments."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from models import ContentCheck
from services.file_types import ALLOWED_MIME_TYPES

logger = logging.getLogger(__name__)

REASON_UNDETERMINABLE = "type undeterminable: no known signature in file content"
REASON_UNREADABLE = "type undeterminable: file content could not be read"
REASON_NOT_PERMITTED = "type not permitted: detected '{mime}'"

DEFAULT_SAMPLE_BYTES = 4100

# ISO base media "ftyp" brands that are not plain MP4 video
_FTYP_BRANDS = {
    b"qt  ": "video/quicktime",
    b"M4A ": "audio/x-m4a",
    b"M4B ": "audio/mp4",
    b"M4P ": "audio/mp4",
    b"heic": "image/heic",
    b"heix": "image/heic",
    b"mif1": "image/heif",
    b"msf1": "image/heif-sequence",
    b"avif": "image/avif",
    b"crx ": "image/x-canon-cr3",
}


class ContentValidator:
    """Judge uploads by their leading bytes, ignoring any declared type.

    The validator never deletes or moves files; callers decide what to do
    with a rejected upload.
    """

    def __init__(
        self,
        *,
        allowed_mime_types: Optional[Iterable[str]] = None,
        sample_bytes: int = DEFAULT_SAMPLE_BYTES,
    ) -> None:
        self.allowed_mime_types = frozenset(allowed_mime_types or ALLOWED_MIME_TYPES)
        self.sample_bytes = sample_bytes

    def validate(self, file_path: Union[str, Path]) -> ContentCheck:
        try:
            with open(file_path, "rb") as fh:
                sample = fh.read(self.sample_bytes)
        except OSError as exc:
            logger.error("File validation failed: unable to read %s: %s", file_path, exc)
            return ContentCheck(accepted=False, verified_type=None, reason=REASON_UNREADABLE)

        detected = self.detect_mime(sample)
        if detected is None:
            logger.warning("File validation failed: no file type detected for %s", file_path)
            return ContentCheck(accepted=False, verified_type=None, reason=REASON_UNDETERMINABLE)

        if detected not in self.allowed_mime_types:
            logger.warning("File validation failed: detected MIME type %s not allowed for %s", detected, file_path)
            return ContentCheck(
                accepted=False,
                verified_type=detected,
                reason=REASON_NOT_PERMITTED.format(mime=detected),
            )

        logger.info("File validation passed: %s for %s", detected, file_path)
        return ContentCheck(accepted=True, verified_type=detected, reason=None)

    @staticmethod
    def detect_mime(sample: bytes) -> Optional[str]:
        """Map leading bytes to a MIME type using well-known signatures."""
        if not sample:
            return None
        header = sample[:16]

        if header.startswith(b"\xff\xd8\xff"):
            return "image/jpeg"
        if header.startswith(b"\x89PNG\r\n\x1a\n"):
            return "image/png"
        if header.startswith((b"GIF87a", b"GIF89a")):
            return "image/gif"
        if header.startswith(b"RIFF") and len(header) >= 12:
            form = header[8:12]
            if form == b"WEBP":
                return "image/webp"
            if form == b"WAVE":
                return "audio/wav"
            if form == b"AVI ":
                return "video/vnd.avi"
            return None
        if len(header) >= 12 and header[4:8] == b"ftyp":
            brand = header[8:12]
            if brand in _FTYP_BRANDS:
                return _FTYP_BRANDS[brand]
            if brand.startswith(b"3g2"):
                return "video/3gpp2"
            if brand.startswith(b"3gp"):
                return "video/3gpp"
            return "video/mp4"
        if header.startswith(b"ID3"):
            return "audio/mpeg"
        if header.startswith(b"%PDF-"):
            return "application/pdf"
        if header.startswith((b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")):
            return "application/zip"
        if header.startswith(b"\x1f\x8b\x08"):
            return "application/gzip"
        if header.startswith(b"7z\xbc\xaf\x27\x1c"):
            return "application/x-7z-compressed"
        if header.startswith(b"Rar!\x1a\x07"):
            return "application/x-rar-compressed"
        if header.startswith(b"OggS"):
            return "audio/ogg"
        if header.startswith(b"fLaC"):
            return "audio/x-flac"
        if header.startswith(b"\x1a\x45\xdf\xa3"):
            if b"webm" in sample[:64]:
                return "video/webm"
            return "video/x-matroska"
        if header.startswith((b"II*\x00", b"MM\x00*")):
            return "image/tiff"
        if header.startswith(b"\x7fELF"):
            return "application/x-elf"
        if header.startswith(b"MZ"):
            return "application/x-msdownload"
        if header.startswith(b"BM") and len(header) >= 14:
            return "image/bmp"
        if len(header) >= 2 and header[0] == 0xFF and (header[1] & 0xE0) == 0xE0:
            layer = (header[1] >> 1) & 0x03
            if layer == 0:
                return "audio/aac"
            return "audio/mpeg"
        return None
