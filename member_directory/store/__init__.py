from member_directory.store.base import ALL_BRANCHES, DirectoryStore
from member_directory.store.memory import InMemoryStore
from member_directory.store.sql import SqlStore

__all__ = [
    "ALL_BRANCHES",
    "DirectoryStore",
    "InMemoryStore",
    "SqlStore",
]
