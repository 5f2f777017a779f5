"""FastAPI routers for messages, attachment files and ZIP downloads."""

from __future__ import annotations

import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import FileResponse, StreamingResponse
from starlette.datastructures import UploadFile

from config import StorageSettings, config
from models import OperationResult, PositionResponse, UploadedFile
from services.attachment_archiver import AttachmentArchiver
from services.attachment_organizer import AttachmentOrganizer
from services.attachment_paths import resolve_attachment_path
from services.content_validator import ContentValidator
from services.errors import (
    AttachmentTooLargeError,
    MessageNotFoundError,
    MessageValidationError,
    StorageError,
)
from services.message_intake import MessageIntake, cleanup_invalid_file, flatten_uploads
from services.message_store import MessageStore

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MB per chunk when spooling uploads
INCOMING_DIR_NAME = ".incoming"
DEFAULT_PAGE_SIZE = 10

router = APIRouter(prefix="/api/messages", tags=["messages"])
uploads_router = APIRouter(prefix="/uploads", tags=["uploads"])

_message_store: Optional[MessageStore] = None
_message_intake: Optional[MessageIntake] = None
_archiver: Optional[AttachmentArchiver] = None


def get_storage_settings() -> StorageSettings:
    return config.STORAGE


def get_message_store() -> MessageStore:
    """Resolve or initialize the shared MessageStore instance."""
    global _message_store
    if _message_store is None:
        settings = config.STORAGE
        _message_store = MessageStore(settings.messages_path, settings.uploads_path)
    return _message_store


def get_message_intake() -> MessageIntake:
    """Resolve or initialize the shared MessageIntake instance."""
    global _message_intake
    if _message_intake is None:
        settings = config.STORAGE
        _message_intake = MessageIntake(
            store=get_message_store(),
            organizer=AttachmentOrganizer(settings.uploads_path),
            validator=ContentValidator(sample_bytes=settings.sniff_sample_bytes),
            settings=settings,
        )
    return _message_intake


def get_archiver() -> AttachmentArchiver:
    """Resolve or initialize the shared AttachmentArchiver instance."""
    global _archiver
    if _archiver is None:
        settings = config.STORAGE
        _archiver = AttachmentArchiver(settings.uploads_path, chunk_size=settings.zip_chunk_size)
    return _archiver


async def _spool_upload(upload: UploadFile, incoming_dir: Path, max_size: int) -> UploadedFile:
    """Copy a parsed multipart file to a temporary path under the uploads tree.

    Copying stops one byte past ``max_size``; the recorded size then exceeds
    the limit and the intake rejects the file.
    """
    incoming_dir.mkdir(parents=True, exist_ok=True)
    temporary_path = incoming_dir / f"upload_{uuid.uuid4().hex}"
    total_bytes = 0
    try:
        with temporary_path.open("wb") as destination:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                total_bytes += len(chunk)
                if total_bytes > max_size:
                    break
                destination.write(chunk)
    except Exception:
        cleanup_invalid_file(temporary_path)
        raise
    finally:
        await upload.close()

    return UploadedFile(
        temporary_path=temporary_path,
        declared_mime_type=upload.content_type,
        original_name=upload.filename,
        size_bytes=total_bytes,
    )


async def _read_submission(request: Request, settings: StorageSettings) -> Tuple[Optional[str], List[UploadedFile]]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body") from exc
        text = payload.get("message") if isinstance(payload, dict) else None
        return (text if isinstance(text, str) else None), []

    form = await request.form()
    text: Optional[str] = None
    fields: Dict[str, List[UploadedFile]] = {}
    incoming_dir = settings.uploads_path / INCOMING_DIR_NAME
    try:
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                spooled = await _spool_upload(value, incoming_dir, settings.max_file_size_bytes)
                fields.setdefault(key, []).append(spooled)
            elif key == "message" and text is None:
                text = value
    except Exception:
        for upload in flatten_uploads(fields):
            cleanup_invalid_file(upload.temporary_path)
        raise
    finally:
        await form.close()
    return text, flatten_uploads(fields)


@router.get("")
async def list_messages(
    offset: int = Query(0, ge=0, description="Number of newest messages to skip"),
    limit: int = Query(DEFAULT_PAGE_SIZE, description="Maximum number of messages to return; values below 1 use the default"),
    store: MessageStore = Depends(get_message_store),
) -> list:
    """Return a window of messages counted back from the newest, oldest first."""
    if limit <= 0:
        limit = DEFAULT_PAGE_SIZE
    window = store.paginate(store.sorted_messages(), offset, limit)
    return [message.to_document() for message in window]


@router.post("")
async def submit_message(
    request: Request,
    intake: MessageIntake = Depends(get_message_intake),
    settings: StorageSettings = Depends(get_storage_settings),
) -> list:
    """Store a message with optional text and any number of file fields."""
    text, uploads = await _read_submission(request, settings)
    try:
        message = intake.submit(text, uploads)
    except AttachmentTooLargeError as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc
    except MessageValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return [message.to_document()]


@router.delete("", response_model=OperationResult)
async def clear_messages(store: MessageStore = Depends(get_message_store)) -> OperationResult:
    """Delete every message together with its attachments."""
    if not store.clear_all():
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to clear messages")
    return OperationResult(success=True)


@router.delete("/{message_id}", response_model=OperationResult)
async def delete_message(message_id: str, store: MessageStore = Depends(get_message_store)) -> OperationResult:
    """Delete one message and its attachment directory."""
    if not store.delete_by_id(message_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return OperationResult(success=True)


@router.get("/{message_id}/position", response_model=PositionResponse)
async def get_message_position(message_id: str, store: MessageStore = Depends(get_message_store)) -> PositionResponse:
    """Return the message's index in creation order (0 = oldest)."""
    position = store.position_of(message_id)
    if position is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return PositionResponse(id=message_id, position=position, total=len(store.read_all()))


@router.get("/{message_id}/download")
async def download_attachments(
    message_id: str,
    store: MessageStore = Depends(get_message_store),
    archiver: AttachmentArchiver = Depends(get_archiver),
) -> StreamingResponse:
    """Stream all attachments of a message as one ZIP archive."""
    message = store.get(message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    try:
        archiver.ensure_downloadable(message)
    except MessageNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return StreamingResponse(
        archiver.iter_zip(message),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="attachments-{message_id}.zip"'},
    )


@uploads_router.get("/{message_id}/{subdir}/{filename}")
async def get_attachment_file(
    message_id: str,
    subdir: str,
    filename: str,
    settings: StorageSettings = Depends(get_storage_settings),
) -> FileResponse:
    """Serve one stored attachment after strict segment validation."""
    try:
        path = resolve_attachment_path(settings.uploads_path, message_id, subdir, filename)
    except MessageValidationError as exc:
        logger.warning("Rejected attachment path %s/%s/%s", message_id, subdir, filename)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")

    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return FileResponse(path, media_type=media_type)
