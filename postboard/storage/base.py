"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (in-memory -> database, local disk -> object store)
without changing the services.

- AccountStore: account records keyed by identifier
- PostStore: post records with paginated search
- FileSystem: the primitives attachments need from a disk
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from postboard.core.models import Account, Page, PageRequest, Post, SearchKind


# =============================================================================
# Storage Interfaces
# =============================================================================


class AccountStore(ABC):
    """Persistence for accounts."""

    @abstractmethod
    def get(self, identifier: str) -> Account | None:
        """Get an account by identifier."""
        pass

    @abstractmethod
    def add(self, account: Account) -> Account:
        """
        Insert a new account.

        Raises DuplicateIdentity if the identifier is taken; the existing
        record is left untouched.
        """
        pass

    @abstractmethod
    def replace(self, account: Account) -> Account:
        """Overwrite an existing account. Raises IdentityNotFound if absent."""
        pass

    @abstractmethod
    def delete(self, identifier: str) -> None:
        """Remove an account. Raises IdentityNotFound if absent."""
        pass

    def exists(self, identifier: str) -> bool:
        return self.get(identifier) is not None


class PostStore(ABC):
    """Persistence for posts."""

    @abstractmethod
    def create(self, post: Post) -> Post:
        """Insert a post and return it with its assigned id."""
        pass

    @abstractmethod
    def find_by_id(self, post_id: int) -> Post | None:
        """Get a post by id."""
        pass

    @abstractmethod
    def search(
        self,
        kind: SearchKind,
        keyword: str | None,
        page: PageRequest,
    ) -> Page[Post]:
        """
        Paginated search.

        A blank or missing keyword lists everything regardless of `kind`.
        TITLE and CONTENT are case-insensitive substring matches; OWNER is
        an exact match on the owner identifier.
        """
        pass

    @abstractmethod
    def update(self, post: Post) -> Post:
        """Overwrite an existing post. Raises PostNotFound if absent."""
        pass

    @abstractmethod
    def delete(self, post_id: int) -> None:
        """Remove a post. Raises PostNotFound if absent."""
        pass


class FileSystem(ABC):
    """
    The filesystem primitives attachments rely on.

    Implementations raise OSError on failure.
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        pass

    @abstractmethod
    def create_directories(self, path: Path) -> None:
        pass

    @abstractmethod
    def write(self, data: bytes, path: Path) -> None:
        """Write bytes to path, replacing any existing file."""
        pass

    @abstractmethod
    def delete_if_exists(self, path: Path) -> bool:
        """Delete a file. Returns False if there was nothing to delete."""
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.

    Initialize once at app startup with appropriate implementations.
    Services receive the pieces they need without knowing the
    underlying implementation.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    accounts: AccountStore
    posts: PostStore
    files: FileSystem
