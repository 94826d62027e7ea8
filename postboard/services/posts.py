"""
Post service - post lifecycle coupled to the attachment lifecycle.

Each operation looks atomic to the caller, but the attachment file and
the post record live in two separate resources and are not committed
together:

- create writes the file first, then the record. If the file write fails
  nothing is persisted. If the record write fails (or the process dies in
  between) the file is orphaned.
- update with a new file deletes the old file, writes the new one, then
  the record. If the new write fails the update is aborted, but the old
  file is already gone: the stored post keeps a descriptor to a missing
  file until the next successful replace or delete.
- delete removes the file first, then the record. A failed file delete is
  logged and the record is deleted anyway.

Concurrent updates to one post are not fenced; the last write wins.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from postboard.auth.policies import Operation, enforce
from postboard.auth.principal import Principal
from postboard.core.errors import IdentityNotFound, PostNotFound, StorageIO
from postboard.core.models import FilePayload, Page, PageRequest, Post, PostInput, SearchKind
from postboard.core.utils import utc_now
from postboard.integrations.sentry import capture_exception
from postboard.services.attachments import AttachmentManager
from postboard.storage.base import AccountStore, PostStore

logger = logging.getLogger(__name__)


class PostService:
    """
    Create, update, delete, fetch and search posts.

    Reads are public. Creating needs a principal; updating and deleting
    need an administrator.
    """

    def __init__(
        self,
        posts: PostStore,
        accounts: AccountStore,
        attachments: AttachmentManager,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.posts = posts
        self.accounts = accounts
        self.attachments = attachments
        self.clock = clock

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, post_id: int, principal: Principal | None = None) -> Post:
        enforce(principal, Operation.POST_READ)
        post = self.posts.find_by_id(post_id)
        if post is None:
            raise PostNotFound(post_id)
        return post

    def search(
        self,
        kind: SearchKind = SearchKind.ALL,
        keyword: str | None = None,
        page: PageRequest | None = None,
        principal: Principal | None = None,
    ) -> Page[Post]:
        enforce(principal, Operation.POST_SEARCH)
        return self.posts.search(kind, keyword, page or PageRequest())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(
        self,
        principal: Principal | None,
        data: PostInput,
        attachment: FilePayload | None = None,
    ) -> Post:
        """
        Create a post owned by the principal.

        Raises:
            Unauthenticated: no principal
            IdentityNotFound: principal's account no longer exists
            EmptyAttachment: attachment has no bytes
            StorageIO: attachment could not be written
        """
        enforce(principal, Operation.POST_CREATE)

        owner = self.accounts.get(principal.identifier)
        if owner is None:
            raise IdentityNotFound(principal.identifier)

        post = Post.new(owner.identifier, data, by=principal.identifier, at=self.clock())

        if attachment is not None:
            post = post.with_attachment(self.attachments.store(attachment))

        created = self.posts.create(post)
        logger.info("Post %s created by %s", created.id, principal.identifier)
        return created

    def update(
        self,
        principal: Principal | None,
        post_id: int,
        data: PostInput,
        attachment: FilePayload | None = None,
    ) -> Post:
        """
        Change title and content; swap the attachment if a new one is given.

        Without a new attachment the existing one is kept.
        """
        post = self.get(post_id)
        enforce(principal, Operation.POST_UPDATE, post.owner_id)

        post = post.with_content(data)
        if attachment is not None:
            post = post.with_attachment(self.attachments.replace(post.attachment, attachment))

        updated = self.posts.update(post.stamped_update(by=principal.identifier, at=self.clock()))
        logger.info("Post %s updated by %s", post_id, principal.identifier)
        return updated

    def delete(self, principal: Principal | None, post_id: int) -> None:
        """Delete a post and, best effort, its attachment file."""
        post = self.get(post_id)
        enforce(principal, Operation.POST_DELETE, post.owner_id)

        try:
            self.attachments.remove(post.attachment)
        except StorageIO as e:
            logger.warning("Attachment cleanup failed for post %s: %s", post_id, e)
            capture_exception(e, post_id=post_id, path=e.path)

        self.posts.delete(post_id)
        logger.info("Post %s deleted by %s", post_id, principal.identifier)
