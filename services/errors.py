"""Exception hierarchy shared by the message board services."""


class MessageBoardError(Exception):
    """Base exception for message board errors."""


class MessageValidationError(MessageBoardError):
    """Raised when a submitted message or one of its files fails validation."""


class AttachmentTooLargeError(MessageValidationError):
    """Raised when an uploaded file exceeds the configured size limit."""


class MessageNotFoundError(MessageBoardError):
    """Raised when a message or one of its attachment files cannot be located."""


class StorageError(MessageBoardError):
    """Raised when the message document or upload tree cannot be read or written."""
