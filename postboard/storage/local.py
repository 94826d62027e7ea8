"""
Local storage implementations.

In-memory record stores and a plain local-disk filesystem. They work
without any external services and back both development and the tests.
"""

from __future__ import annotations

import itertools
import threading
from pathlib import Path
from typing import Callable

from postboard.core.errors import (
    DuplicateIdentity,
    IdentityNotFound,
    PostNotFound,
    ValidationFailed,
)
from postboard.core.models import Account, Page, PageRequest, Post, SearchKind
from postboard.core.utils import is_blank
from postboard.storage.base import (
    AccountStore,
    FileSystem,
    PostStore,
    StorageProvider,
)


# =============================================================================
# In-Memory Account Storage
# =============================================================================


class InMemoryAccountStore(AccountStore):
    """Accounts held in a dict."""

    def __init__(self):
        self._accounts: dict[str, Account] = {}
        self._lock = threading.Lock()

    def get(self, identifier: str) -> Account | None:
        return self._accounts.get(identifier)

    def add(self, account: Account) -> Account:
        with self._lock:
            if account.identifier in self._accounts:
                raise DuplicateIdentity(account.identifier)
            self._accounts[account.identifier] = account
        return account

    def replace(self, account: Account) -> Account:
        with self._lock:
            if account.identifier not in self._accounts:
                raise IdentityNotFound(account.identifier)
            self._accounts[account.identifier] = account
        return account

    def delete(self, identifier: str) -> None:
        with self._lock:
            if identifier not in self._accounts:
                raise IdentityNotFound(identifier)
            del self._accounts[identifier]


# =============================================================================
# In-Memory Post Storage
# =============================================================================


# Sortable fields: name -> key function
SORT_KEYS: dict[str, Callable[[Post], object]] = {
    "id": lambda p: p.id,
    "title": lambda p: p.title.casefold(),
    "created_at": lambda p: p.created_at,
    "modified_at": lambda p: p.modified_at,
}


class InMemoryPostStore(PostStore):
    """
    Posts held in an insertion-ordered dict.

    Ids come from a counter and are never reused, even after deletes.
    """

    def __init__(self):
        self._posts: dict[int, Post] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create(self, post: Post) -> Post:
        with self._lock:
            stored = post.with_id(next(self._ids))
            self._posts[stored.id] = stored
        return stored

    def find_by_id(self, post_id: int) -> Post | None:
        return self._posts.get(post_id)

    def search(
        self,
        kind: SearchKind,
        keyword: str | None,
        page: PageRequest,
    ) -> Page[Post]:
        if is_blank(keyword):
            kind = SearchKind.ALL

        matches = [p for p in list(self._posts.values()) if _matches(p, kind, keyword)]

        if page.sort:
            field_name = page.sort.lstrip("-")
            key = SORT_KEYS.get(field_name)
            if key is None:
                raise ValidationFailed(f"Cannot sort by '{field_name}'")
            matches.sort(key=key, reverse=page.sort.startswith("-"))

        return Page[Post](
            items=matches[page.offset:page.offset + page.size],
            total=len(matches),
            page=page.page,
            size=page.size,
        )

    def update(self, post: Post) -> Post:
        with self._lock:
            if post.id not in self._posts:
                raise PostNotFound(post.id)
            self._posts[post.id] = post
        return post

    def delete(self, post_id: int) -> None:
        with self._lock:
            if post_id not in self._posts:
                raise PostNotFound(post_id)
            del self._posts[post_id]


def _matches(post: Post, kind: SearchKind, keyword: str | None) -> bool:
    if kind is SearchKind.ALL:
        return True
    if kind is SearchKind.OWNER:
        return post.owner_id == keyword
    needle = keyword.casefold()
    if kind is SearchKind.TITLE:
        return needle in post.title.casefold()
    if kind is SearchKind.CONTENT:
        return needle in post.content.casefold()
    return False


# =============================================================================
# Local Filesystem
# =============================================================================


class LocalFileSystem(FileSystem):
    """Files on the local disk."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def create_directories(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def write(self, data: bytes, path: Path) -> None:
        Path(path).write_bytes(data)

    def delete_if_exists(self, path: Path) -> bool:
        path = Path(path)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True


# =============================================================================
# Factory
# =============================================================================


def create_local_storage() -> StorageProvider:
    """Create a StorageProvider with local implementations."""
    return StorageProvider(
        accounts=InMemoryAccountStore(),
        posts=InMemoryPostStore(),
        files=LocalFileSystem(),
    )
