"""
Tests for services/attachment_paths.py - path traversal guards.
"""

import uuid
from pathlib import Path
from unittest.mock import patch

import pytest

from services.attachment_paths import is_message_id, resolve_attachment_path, validate_segments
from services.errors import MessageValidationError

MESSAGE_ID = str(uuid.uuid4())
FILENAME = f"{uuid.uuid4()}.png"


class TestIsMessageId:

    def test_accepts_uuid(self):
        assert is_message_id(MESSAGE_ID)
        assert is_message_id(MESSAGE_ID.upper())

    @pytest.mark.parametrize("value", ["", "abc", "../../etc", MESSAGE_ID + "/..", MESSAGE_ID[:-1]])
    def test_rejects_other_values(self, value):
        assert not is_message_id(value)


class TestValidateSegments:

    def test_valid_segments(self):
        validate_segments(MESSAGE_ID, "images", FILENAME)

    @pytest.mark.parametrize(
        "message_id,subdir,filename,error",
        [
            ("../../etc", "images", FILENAME, "Invalid message id"),
            ("..", "images", FILENAME, "Invalid message id"),
            (MESSAGE_ID, "..", FILENAME, "Invalid attachment directory"),
            (MESSAGE_ID, "Images", FILENAME, "Invalid attachment directory"),
            (MESSAGE_ID, "images/..", FILENAME, "Invalid attachment directory"),
            (MESSAGE_ID, "images", "../messages.json", "Invalid attachment filename"),
            (MESSAGE_ID, "images", f"..{FILENAME}", "Invalid attachment filename"),
            (MESSAGE_ID, "images", "passwd", "Invalid attachment filename"),
            (MESSAGE_ID, "images", f"{uuid.uuid4()}.toolongext", "Invalid attachment filename"),
        ],
    )
    def test_rejects_bad_segments(self, message_id, subdir, filename, error):
        with pytest.raises(MessageValidationError, match=error):
            validate_segments(message_id, subdir, filename)


class TestResolveAttachmentPath:

    def test_builds_path_under_root(self, tmp_path):
        path = resolve_attachment_path(tmp_path, MESSAGE_ID, "images", FILENAME)
        assert path == tmp_path / MESSAGE_ID / "images" / FILENAME

    def test_rejection_happens_before_filesystem_access(self, tmp_path):
        """
        Given: A traversal attempt in the message id segment
        When: resolve_attachment_path() is called
        Then: It raises without calling any filesystem check
        """
        with patch.object(Path, "exists") as exists, patch.object(Path, "is_file") as is_file, \
                patch.object(Path, "stat") as stat:
            with pytest.raises(MessageValidationError):
                resolve_attachment_path(tmp_path, "../../etc", "images", "passwd")
        exists.assert_not_called()
        is_file.assert_not_called()
        stat.assert_not_called()
