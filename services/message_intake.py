"""Turn a submitted text plus uploads into a stored message."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from config import StorageSettings
from models import Message, UploadedFile
from services.attachment_organizer import AttachmentOrganizer
from services.content_validator import ContentValidator
from services.errors import AttachmentTooLargeError, MessageValidationError, StorageError
from services.message_store import MessageStore

logger = logging.getLogger(__name__)

UploadField = Union[UploadedFile, Sequence[UploadedFile], None]


def flatten_uploads(fields: Mapping[str, UploadField]) -> List[UploadedFile]:
    """Collapse ``{field: file | [files]}`` into one ordered list."""
    files: List[UploadedFile] = []
    for value in fields.values():
        if value is None:
            continue
        if isinstance(value, UploadedFile):
            files.append(value)
        else:
            files.extend(item for item in value if item is not None)
    return files


def cleanup_invalid_file(path: Path) -> None:
    """Delete a rejected temporary upload; failures are logged and swallowed."""
    try:
        Path(path).unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Failed to remove invalid file %s: %s", path, exc)


class MessageIntake:
    """Validate uploads, organize accepted files and append the message.

    Any rejection removes every temporary file of the request before the
    error is raised, so nothing is left behind in the uploads directory.
    """

    def __init__(
        self,
        *,
        store: MessageStore,
        organizer: AttachmentOrganizer,
        validator: ContentValidator,
        settings: StorageSettings,
    ) -> None:
        self.store = store
        self.organizer = organizer
        self.validator = validator
        self.settings = settings

    def submit(self, text: Optional[str], uploads: Sequence[UploadedFile]) -> Message:
        text = text or ""
        uploads = list(uploads)

        if not text and not uploads:
            raise MessageValidationError("Message text or at least one file is required")

        try:
            self._check_limits(uploads)
            self._verify_contents(uploads)
        except MessageValidationError:
            self._quarantine(uploads)
            raise

        try:
            organized = self.organizer.organize(uploads)
        except OSError as exc:
            logger.error("Failed to organize uploaded files: %s", exc)
            self._quarantine(uploads)
            raise StorageError("Unable to store attachments") from exc

        if len(organized.attachments) < len(uploads):
            # Dropped uploads were never moved out of the incoming directory
            self._quarantine(uploads)
        message_id = organized.message_id
        if message_id and not organized.attachments:
            self.store.remove_attachments(message_id)
            message_id = None

        if not text and not organized.attachments:
            raise MessageValidationError("Message text or at least one file is required")

        message = Message(
            id=message_id or str(uuid.uuid4()),
            text=text,
            files=organized.attachments,
        )
        logger.info("Received message: %s", text or "No text, files only")
        self.store.add(message)
        return message

    def _check_limits(self, uploads: Sequence[UploadedFile]) -> None:
        if len(uploads) > self.settings.max_files_per_request:
            raise MessageValidationError(
                f"Too many files: at most {self.settings.max_files_per_request} per message"
            )
        limit = self.settings.max_file_size_bytes
        for upload in uploads:
            size = upload.size_bytes
            if size is None:
                try:
                    size = upload.temporary_path.stat().st_size
                except OSError:
                    size = 0
                upload.size_bytes = size
            if size > limit:
                logger.warning("File upload rejected: %s too large (%s bytes)", upload.display_name, size)
                raise AttachmentTooLargeError(
                    f'File "{upload.display_name}" exceeds the maximum size of {limit} bytes'
                )

    def _verify_contents(self, uploads: Iterable[UploadedFile]) -> None:
        for upload in uploads:
            check = self.validator.validate(upload.temporary_path)
            if not check.accepted:
                logger.warning("File validation failed for %s: %s", upload.display_name, check.reason)
                raise MessageValidationError(
                    f'File "{upload.display_name}" failed validation: {check.reason}'
                )
            upload.verified_mime_type = check.verified_type
            logger.info("File validated successfully: %s (%s)", upload.display_name, check.verified_type)

    @staticmethod
    def _quarantine(uploads: Iterable[UploadedFile]) -> None:
        for upload in uploads:
            cleanup_invalid_file(upload.temporary_path)
