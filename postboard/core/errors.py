"""
Domain errors.

Every failure the core reports to a caller is one of these. The HTTP layer
maps them to status codes; nothing below the API knows about HTTP.
"""

from __future__ import annotations


class PostboardError(Exception):
    """Base exception for all domain errors."""
    pass


class IdentityNotFound(PostboardError):
    """No account matches the identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Account not found: {identifier}")


class DuplicateIdentity(PostboardError):
    """An account with this identifier already exists."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Account already exists: {identifier}")


class PostNotFound(PostboardError):
    """No post matches the identifier."""

    def __init__(self, post_id: int):
        self.post_id = post_id
        super().__init__(f"Post with id {post_id} not found")


class Unauthenticated(PostboardError):
    """The operation needs an authenticated principal."""
    pass


class Forbidden(PostboardError):
    """The principal is authenticated but not allowed to do this."""
    pass


class EmptyAttachment(PostboardError):
    """An attachment was supplied with no content."""
    pass


class ValidationFailed(PostboardError):
    """Input did not satisfy a field constraint."""
    pass


class StorageIO(PostboardError):
    """The filesystem failed while storing, replacing or removing a file."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)
