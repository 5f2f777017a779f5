"""Relocate accepted uploads into the per-message directory tree."""

from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import Dict, List, Sequence

from models import AttachmentRef, OrganizedAttachments, UploadedFile
from services.file_types import extension_for, subdirectory_for

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"


class AttachmentOrganizer:
    """Move validated uploads to ``<uploads>/<messageId>/<subdir>/<uuid><ext>``.

    Stored names are always generated, never derived from client input.
    Nothing is rolled back when a move fails halfway: the ``OSError`` reaches
    the caller and files already moved stay in the message directory.
    """

    def __init__(self, uploads_root: Path) -> None:
        self.uploads_root = Path(uploads_root)

    def organize(self, accepted_files: Sequence[UploadedFile]) -> OrganizedAttachments:
        if not accepted_files:
            return OrganizedAttachments(message_id=None, attachments=[])

        message_id = str(uuid.uuid4())
        message_dir = self.uploads_root / message_id
        message_dir.mkdir(parents=True, exist_ok=True)

        attachments: List[AttachmentRef] = []
        for subdir, group in self._group_by_subdir(accepted_files).items():
            for upload in group:
                attachments.append(self._move_single_file(upload, message_id, subdir))

        logger.info("Stored %d attachment(s) for message %s", len(attachments), message_id)
        return OrganizedAttachments(message_id=message_id, attachments=attachments)

    def _group_by_subdir(self, files: Sequence[UploadedFile]) -> Dict[str, List[UploadedFile]]:
        groups: Dict[str, List[UploadedFile]] = {}
        for upload in files:
            mime_type = upload.verified_mime_type
            subdir = subdirectory_for(mime_type)
            if subdir is None:
                logger.warning(
                    "Dropping %s: type %r has no storage directory",
                    upload.display_name,
                    mime_type,
                )
                continue
            groups.setdefault(subdir, []).append(upload)
        return groups

    def _move_single_file(self, upload: UploadedFile, message_id: str, subdir: str) -> AttachmentRef:
        mime_type = upload.verified_mime_type or ""
        filename = f"{uuid.uuid4()}{extension_for(mime_type)}"
        subdir_path = self.uploads_root / message_id / subdir
        subdir_path.mkdir(parents=True, exist_ok=True)
        destination = subdir_path / filename

        shutil.move(str(upload.temporary_path), str(destination))

        size = upload.size_bytes
        if size is None:
            size = destination.stat().st_size

        relative_path = f"{message_id}/{subdir}/{filename}"
        return AttachmentRef(
            stored_relative_path=relative_path,
            original_name=upload.display_name,
            verified_mime_type=mime_type,
            size_bytes=size,
            access_url=f"{UPLOADS_URL_PREFIX}/{relative_path}",
        )
