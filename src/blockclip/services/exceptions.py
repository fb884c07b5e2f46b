"""Custom exceptions for blockclip services."""

from typing import Optional


class TransferError(Exception):
    """Base class for every copy/paste failure reported to the user.

    Attributes:
        message: Human-readable error message
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TransferFailure(TransferError):
    """Raised when the clipboard boundary refuses a read or write.

    Never retried automatically: a fresh permission grant may need a new
    user gesture.

    Attributes:
        operation: "read" or "write"
    """

    def __init__(self, operation: str, message: str = "Clipboard access was refused"):
        self.operation = operation
        super().__init__(f"{message} ({operation})")


class TransferBusy(TransferError):
    """Raised when a copy or paste starts while another one is pending."""

    def __init__(self, pending: str):
        self.pending = pending
        super().__init__(f"A {pending} is still in progress")


class EmptyClipboard(TransferError):
    """Raised when there is nothing to paste."""

    def __init__(self, message: str = "Clipboard is empty"):
        super().__init__(message)


class MalformedPayload(TransferError):
    """Raised when clipboard text is not a block payload.

    Attributes:
        reason: What was wrong with the payload (no payload content included)
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Clipboard does not contain a valid block payload: {reason}")


class SchemaRejection(TransferError):
    """Raised by a destination that refuses a sanitized subtree.

    Attributes:
        kind: Kind of the offending block, if known
        field_name: Name of the offending field, if known
    """

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        field_name: Optional[str] = None,
    ):
        self.kind = kind
        self.field_name = field_name
        super().__init__(message)
