from member_directory.db.models import (
    Base,
    RecordRow,
    TimeStampMixin,
    TransferRequestRow,
)

__all__ = [
    "Base",
    "RecordRow",
    "TimeStampMixin",
    "TransferRequestRow",
]
