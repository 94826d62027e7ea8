"""
Storage abstractions.

- AccountStore -> accounts keyed by identifier
- PostStore -> posts with paginated search
- FileSystem -> disk primitives for attachments
"""

from postboard.storage.base import (
    AccountStore,
    PostStore,
    FileSystem,
    StorageProvider,
)
from postboard.storage.local import (
    InMemoryAccountStore,
    InMemoryPostStore,
    LocalFileSystem,
    create_local_storage,
)

__all__ = [
    "AccountStore",
    "PostStore",
    "FileSystem",
    "StorageProvider",
    "InMemoryAccountStore",
    "InMemoryPostStore",
    "LocalFileSystem",
    "create_local_storage",
]
