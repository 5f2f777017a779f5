"""Shared pytest fixtures for Message Board tests."""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import StorageSettings  # noqa: E402
from models import AttachmentRef, Message, UploadedFile  # noqa: E402
from services.message_store import MessageStore  # noqa: E402


# ============================================================================
# Sample file contents (leading bytes are what matters)
# ============================================================================

SAMPLE_CONTENT = {
    "image/png": b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 64,
    "image/jpeg": b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x01" * 64,
    "image/gif": b"GIF89a\x01\x00\x01\x00" + b"\x00" * 32,
    "image/webp": b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 32,
    "video/mp4": b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00" * 64,
    "audio/mpeg": b"ID3\x03\x00\x00\x00\x00\x00\x21" + b"\x00" * 64,
    "audio/wav": b"RIFF\x24\x00\x00\x00WAVEfmt \x10\x00\x00\x00" + b"\x00" * 32,
    "application/pdf": b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n" + b"\x00" * 32,
    "application/zip": b"PK\x03\x04\x14\x00\x00\x00" + b"\x00" * 32,
}


@pytest.fixture
def sample_content():
    """Byte payloads keyed by the MIME type their signature encodes."""
    return dict(SAMPLE_CONTENT)


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def storage_settings(tmp_path):
    """Storage settings rooted in a temporary directory."""
    return StorageSettings(data_dir=str(tmp_path / "data"))


@pytest.fixture
def uploads_root(storage_settings):
    path = storage_settings.uploads_path
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def message_store(storage_settings, uploads_root):
    """A MessageStore with an initialized, empty layout."""
    store = MessageStore(storage_settings.messages_path, uploads_root)
    store.ensure_layout()
    return store


@pytest.fixture
def make_upload(uploads_root):
    """Factory writing bytes to a temporary upload file."""
    incoming = uploads_root / ".incoming"
    incoming.mkdir(parents=True, exist_ok=True)
    counter = {"n": 0}

    def _make(content: bytes, original_name: str = "file.bin", declared: str = "application/octet-stream") -> UploadedFile:
        counter["n"] += 1
        path = incoming / f"upload_{counter['n']:04d}"
        path.write_bytes(content)
        return UploadedFile(
            temporary_path=path,
            declared_mime_type=declared,
            original_name=original_name,
            size_bytes=len(content),
        )

    return _make


@pytest.fixture
def make_message():
    """Factory for messages with deterministic, increasing timestamps."""
    base = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def _make(index: int = 0, text: str = None, files=None) -> Message:
        return Message(
            text=text if text is not None else f"message {index}",
            files=files or [],
            created_at=base + timedelta(minutes=index),
        )

    return _make


@pytest.fixture
def stored_attachment(uploads_root):
    """Factory creating a file on disk and the AttachmentRef describing it."""

    def _make(message_id: str, subdir: str, filename: str, content: bytes, mime: str) -> AttachmentRef:
        target: Path = uploads_root / message_id / subdir / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        relative = f"{message_id}/{subdir}/{filename}"
        return AttachmentRef(
            stored_relative_path=relative,
            original_name=filename,
            verified_mime_type=mime,
            size_bytes=len(content),
            access_url=f"/uploads/{relative}",
        )

    return _make
