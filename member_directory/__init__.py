"""Member and visitor directory engine.

Filtering, pagination and selection for a directory screen, batch
operations (transfer, notify, delete, update) over a selection, and
chunked bulk import of spreadsheet rows.
"""

from member_directory.batch import (
    BatchCoordinator,
    DeleteOperation,
    NotifyOperation,
    TransferOperation,
    UpdateOperation,
)
from member_directory.config import EngineSettings, parse_config
from member_directory.core import (
    BatchAbortedError,
    BatchResult,
    CollaboratorUnavailableError,
    ImportResult,
    MessageDispatchFailedException,
    PreconditionFailedError,
    WriteFailedException,
)
from member_directory.facade import MemberDirectory
from member_directory.importing import ChunkedImporter, load_rows
from member_directory.models import Category, Record, TransferRequest
from member_directory.view import DirectoryView, FilterCriteria, Tab

__all__ = [
    "BatchAbortedError",
    "BatchCoordinator",
    "BatchResult",
    "Category",
    "ChunkedImporter",
    "CollaboratorUnavailableError",
    "DeleteOperation",
    "DirectoryView",
    "EngineSettings",
    "FilterCriteria",
    "ImportResult",
    "MemberDirectory",
    "MessageDispatchFailedException",
    "NotifyOperation",
    "PreconditionFailedError",
    "Record",
    "Tab",
    "TransferOperation",
    "TransferRequest",
    "UpdateOperation",
    "WriteFailedException",
    "load_rows",
    "parse_config",
]
