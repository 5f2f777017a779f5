"""
Data Models for the Message Board backend
=========================================

Pydantic models for persisted records and API payloads, plus the plain
dataclasses passed between the ingestion services.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AttachmentRef(BaseModel):
    """Metadata describing one stored file belonging to a message."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    stored_relative_path: str = Field(
        ...,
        alias="filename",
        description="Path relative to the uploads root: messageId/subdir/generated.ext",
    )
    original_name: str = Field(..., alias="originalname", description="Filename provided by the client")
    verified_mime_type: str = Field(..., alias="mimetype", description="MIME type detected from content")
    size_bytes: int = Field(..., ge=0, alias="size", description="Size of the stored file in bytes")
    access_url: str = Field(..., alias="url", description="Public URL under /uploads")

    @property
    def archive_name(self) -> str:
        """Entry name inside a ZIP: the relative path without its message id segment."""
        _, _, remainder = self.stored_relative_path.partition("/")
        return remainder or self.stored_relative_path


class Message(BaseModel):
    """A persisted unit of text and/or attachments."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="UUIDv4 assigned at creation")
    text: str = Field(default="", alias="message", description="Message text, possibly empty")
    files: List[AttachmentRef] = Field(default_factory=list, description="Attachments owned by the message")
    created_at: datetime = Field(default_factory=utc_now, alias="timestamp", description="Creation time (UTC)")

    @field_validator("created_at")
    @classmethod
    def _ensure_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _require_content(self) -> "Message":
        if not self.text and not self.files:
            raise ValueError("a message needs text or at least one attachment")
        return self

    @property
    def has_attachments(self) -> bool:
        return bool(self.files)

    def to_document(self) -> dict:
        """Serialize using the persisted key names."""
        return self.model_dump(mode="json", by_alias=True)


class PositionResponse(BaseModel):
    """Ordinal position of a message among all messages, oldest first."""

    id: str
    position: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


class OperationResult(BaseModel):
    """Generic success envelope for mutating endpoints."""

    success: bool
    error: Optional[str] = None


@dataclass
class UploadedFile:
    """One file delivered by the upload parser.

    Everything except the temporary path is client supplied and untrusted.
    ``verified_mime_type`` is filled in once content validation accepts it.
    """

    temporary_path: Path
    declared_mime_type: Optional[str] = None
    original_name: Optional[str] = None
    size_bytes: Optional[int] = None
    verified_mime_type: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.original_name or self.temporary_path.name or "unknown"


@dataclass(frozen=True)
class ContentCheck:
    """Outcome of inspecting a file's leading bytes."""

    accepted: bool
    verified_type: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class OrganizedAttachments:
    """Result of moving accepted uploads into a message directory."""

    message_id: Optional[str] = None
    attachments: List[AttachmentRef] = field(default_factory=list)
