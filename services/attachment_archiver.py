"""Streamed ZIP archives of a message's attachments."""

from __future__ import annotations

import logging
import zipfile
from contextlib import closing
from pathlib import Path
from typing import BinaryIO, Iterator, List

from models import AttachmentRef, Message
from services.errors import MessageNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class _ChunkSink:
    """Write-only, non-seekable buffer drained between archive writes.

    It has no ``tell``, so ``zipfile`` writes data descriptors instead of
    seeking back to patch local headers.
    """

    def __init__(self) -> None:
        self._chunks: List[bytes] = []

    def write(self, data) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


class AttachmentArchiver:
    """Build a maximum-compression ZIP of a message's files while it is being sent.

    Callers are expected to check that the message has attachments and that
    every file exists (see ``missing_files``) before starting: once bytes are
    on the wire a failure can only abort the transfer.
    """

    def __init__(self, uploads_root: Path, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.uploads_root = Path(uploads_root)
        self.chunk_size = chunk_size

    def path_for(self, attachment: AttachmentRef) -> Path:
        return self.uploads_root / attachment.stored_relative_path

    def missing_files(self, message: Message) -> List[AttachmentRef]:
        return [ref for ref in message.files if not self.path_for(ref).is_file()]

    def ensure_downloadable(self, message: Message) -> None:
        """Raise MessageNotFoundError unless the message has attachments and all of them exist."""
        if not message.has_attachments:
            raise MessageNotFoundError("Message has no attachments")
        missing = self.missing_files(message)
        if missing:
            logger.warning("ZIP download for %s refused: %d file(s) missing", message.id, len(missing))
            raise MessageNotFoundError("Attachment file is missing")

    def iter_zip(self, message: Message) -> Iterator[bytes]:
        """Yield the archive as consecutive byte chunks."""
        sink = _ChunkSink()
        try:
            with zipfile.ZipFile(sink, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
                for attachment in message.files:
                    with self.path_for(attachment).open("rb") as source, \
                            archive.open(attachment.archive_name, "w") as entry:
                        while True:
                            chunk = source.read(self.chunk_size)
                            if not chunk:
                                break
                            entry.write(chunk)
                            data = sink.drain()
                            if data:
                                yield data
                    data = sink.drain()
                    if data:
                        yield data
            data = sink.drain()
            if data:
                yield data
        except GeneratorExit:
            logger.warning("ZIP stream for message %s closed by consumer", message.id)
            raise
        except Exception:
            logger.exception("ZIP stream for message %s aborted", message.id)
            raise
        logger.info("Streamed %d attachment(s) of message %s as ZIP", len(message.files), message.id)

    def stream_zip(self, message: Message, sink: BinaryIO) -> None:
        """Write the archive into an open binary sink, stopping at the first failed write."""
        with closing(self.iter_zip(message)) as chunks:
            for chunk in chunks:
                sink.write(chunk)
