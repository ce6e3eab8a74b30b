from member_directory.core.exceptions import (
    BatchAbortedError,
    CollaboratorUnavailableError,
    MessageDispatchFailedException,
    PreconditionFailedError,
    RecordNotFoundError,
    UnsupportedProviderError,
    WriteFailedException,
)
from member_directory.core.types import (
    BatchResult,
    ChunkOutcome,
    ImportResult,
    ItemError,
    RowError,
)

__all__ = [
    "BatchAbortedError",
    "BatchResult",
    "ChunkOutcome",
    "CollaboratorUnavailableError",
    "ImportResult",
    "ItemError",
    "MessageDispatchFailedException",
    "PreconditionFailedError",
    "RecordNotFoundError",
    "RowError",
    "UnsupportedProviderError",
    "WriteFailedException",
]
