"""Custom exceptions for directory batch operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from member_directory.core.types import BatchResult, ImportResult


class WriteFailedException(Exception):
    """A single store write (one record, one chunk) was rejected.

    Item-level: batches record it and move on to the next item.
    """

    def __init__(self, message: str | None = None):
        self.message = f"Write failed: {message}" if message else "Write failed"
        super().__init__(self.message)


class MessageDispatchFailedException(Exception):
    """The messaging collaborator refused a bulk message."""

    def __init__(self, message: str | None = None):
        self.message = (
            f"Message dispatch failed: {message}"
            if message
            else "Message dispatch failed"
        )
        super().__init__(self.message)


class CollaboratorUnavailableError(Exception):
    """The store or messenger cannot serve any further request.

    Raised for lost authentication, dropped connections and the like.
    Batches stop at the first one of these.
    """

    pass


class RecordNotFoundError(WriteFailedException):
    """Raised when an update or delete targets an unknown record id."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"record {record_id} not found")


class PreconditionFailedError(ValueError):
    """An operation is missing required input; nothing was written."""

    pass


class BatchAbortedError(Exception):
    """A batch or import stopped early on a collaborator-fatal error.

    ``result`` holds everything that completed before the abort, so the
    caller can still report and reconcile the partial work.
    """

    def __init__(self, result: BatchResult | ImportResult, cause: BaseException):
        self.result = result
        self.cause = cause
        super().__init__(
            f"Batch aborted after {result.success_count} succeeded and "
            f"{result.failure_count} failed: {cause}"
        )


class UnsupportedProviderError(ValueError):
    """Raised when an unknown store or messenger provider is requested."""

    pass
