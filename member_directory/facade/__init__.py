from member_directory.facade.core import MemberDirectory
from member_directory.facade.types import ReloadSummary, TransferSummary

__all__ = [
    "MemberDirectory",
    "ReloadSummary",
    "TransferSummary",
]
