from member_directory.batch.coordinator import BatchCoordinator
from member_directory.batch.operations import (
    BatchOperation,
    DeleteOperation,
    NotifyOperation,
    TransferOperation,
    UpdateOperation,
    parse_operation,
)

__all__ = [
    "BatchCoordinator",
    "BatchOperation",
    "DeleteOperation",
    "NotifyOperation",
    "TransferOperation",
    "UpdateOperation",
    "parse_operation",
]
