"""JSON document store for messages and their attachment directories."""

from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

import json_utils as json
from models import Message

logger = logging.getLogger(__name__)


class MessageStore:
    """Own the message document and the attachment directories it references.

    Every mutation reads the whole document, changes it in memory and rewrites
    it in full. Mutations are serialized inside this process; separate
    processes sharing the same file can still lose each other's updates.
    """

    def __init__(self, messages_file: Path, uploads_root: Path) -> None:
        self.messages_file = Path(messages_file)
        self.uploads_root = Path(uploads_root)
        self._lock = threading.RLock()

    def ensure_layout(self) -> None:
        """Create the data directory, uploads directory and an empty document when missing."""
        self.messages_file.parent.mkdir(parents=True, exist_ok=True)
        self.uploads_root.mkdir(parents=True, exist_ok=True)
        if not self.messages_file.exists():
            self._write(self.messages_file, [])
            logger.info("Initialized empty message document at %s", self.messages_file)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def load_or_empty(self) -> List[Message]:
        """Return the stored messages, or an empty list when the document is missing or unreadable.

        A missing file (first run) and a corrupted file are treated the same
        way. A corrupted document is overwritten by the next mutation.
        Individual records that fail validation are logged and skipped; the
        remaining records are kept.
        """
        return self._load(raise_io_errors=False)

    def _load(self, *, raise_io_errors: bool) -> List[Message]:
        try:
            with self.messages_file.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except FileNotFoundError:
            logger.info("%s not found, returning empty list", self.messages_file.name)
            return []
        except OSError as exc:
            if raise_io_errors:
                raise
            logger.warning("Message document %s is unreadable; treating as empty: %s", self.messages_file, exc)
            return []
        except json.JSONDecodeError as exc:
            logger.warning("Message document %s is not valid JSON; treating as empty: %s", self.messages_file, exc)
            return []

        if not isinstance(payload, list):
            logger.warning("Message document %s is not a list; treating as empty", self.messages_file)
            return []
        messages: List[Message] = []
        for index, entry in enumerate(payload):
            try:
                messages.append(Message.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping invalid record %d in %s: %s", index, self.messages_file, exc)
        return messages

    def read_all(self) -> List[Message]:
        return self.load_or_empty()

    def get(self, message_id: str) -> Optional[Message]:
        for message in self.load_or_empty():
            if message.id == message_id:
                return message
        return None

    def sorted_messages(self) -> List[Message]:
        """All messages ordered by creation time, oldest first."""
        return sort_by_created_at(self.load_or_empty())

    def position_of(self, message_id: str) -> Optional[int]:
        """Index of the message in creation order (0 = oldest), or None when absent."""
        for index, message in enumerate(self.sorted_messages()):
            if message.id == message_id:
                return index
        return None

    @staticmethod
    def paginate(all_sorted: Sequence[Message], offset: int, limit: int) -> List[Message]:
        """Window counted backwards from the newest message, returned oldest first.

        The window is ``[total - offset - limit, total - offset)`` clamped to
        ``[0, total]``.
        """
        total = len(all_sorted)
        offset = max(offset, 0)
        limit = max(limit, 0)
        start = min(max(0, total - offset - limit), total)
        end = min(max(0, total - offset), total)
        return list(all_sorted[start:end])

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, message: Message) -> List[Message]:
        """Append a message, persist, and return the full updated list."""
        with self._lock:
            messages = self.load_or_empty()
            messages.append(message)
            self._persist(messages)
        logger.info("Stored message %s (%d attachment(s))", message.id, len(message.files))
        return messages

    def delete_by_id(self, message_id: str) -> bool:
        """Delete one message and its attachment directory.

        Directory removal is best-effort; once the id is found the record is
        always removed.
        """
        with self._lock:
            messages = self.load_or_empty()
            index = next((i for i, message in enumerate(messages) if message.id == message_id), None)
            if index is None:
                return False

            if messages[index].has_attachments:
                self.remove_attachments(message_id)

            del messages[index]
            self._persist(messages)
        logger.info("Deleted message %s", message_id)
        return True

    def clear_all(self) -> bool:
        """Delete every message and attachment directory.

        Returns False only when the document cannot be read or the empty
        document cannot be written.
        """
        with self._lock:
            try:
                messages = self._load(raise_io_errors=True)
            except OSError as exc:
                logger.error("Unable to read message document before clearing: %s", exc)
                return False

            for message in messages:
                if message.has_attachments:
                    self.remove_attachments(message.id)

            try:
                self._persist([])
            except OSError as exc:
                logger.error("Unable to persist empty message document: %s", exc)
                return False
        logger.info("Cleared %d message(s)", len(messages))
        return True

    def remove_attachments(self, message_id: str) -> bool:
        """Recursively remove ``uploads/<message_id>``; failures are logged, not raised."""
        message_dir = self.uploads_root / message_id
        if message_dir.resolve().parent != self.uploads_root.resolve():
            logger.error("Refusing to remove %s: outside uploads directory", message_dir)
            return False
        try:
            shutil.rmtree(message_dir)
        except FileNotFoundError:
            return True
        except OSError as exc:
            logger.error("Failed to delete uploads directory for message %s: %s", message_id, exc)
            return False
        logger.info("Deleted uploads directory for message %s", message_id)
        return True

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    def _persist(self, messages: Sequence[Message]) -> None:
        self._write(self.messages_file, [message.to_document() for message in messages])

    @staticmethod
    def _write(path: Path, payload: list) -> None:
        # Atomic write: write to temp file, then rename
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_file.open("w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
            temp_file.replace(path)
        except Exception:
            temp_file.unlink(missing_ok=True)
            raise


def sort_by_created_at(messages: Sequence[Message]) -> List[Message]:
    # sorted() is stable, so equal timestamps keep insertion order
    return sorted(messages, key=lambda message: message.created_at)
