"""
Core module - data models, errors and shared helpers.

This module contains:
- models: Account, Post, attachment and pagination values
- errors: Domain error taxonomy
- utils: Shared utility functions
"""

from postboard.core.models import (
    Account,
    AttachmentDescriptor,
    FilePayload,
    Page,
    PageRequest,
    Post,
    PostInput,
    ProfileUpdate,
    SearchKind,
)

from postboard.core.errors import (
    PostboardError,
    IdentityNotFound,
    DuplicateIdentity,
    PostNotFound,
    Unauthenticated,
    Forbidden,
    EmptyAttachment,
    ValidationFailed,
    StorageIO,
)

from postboard.core.utils import generate_id, utc_now

__all__ = [
    # Models
    "Account",
    "AttachmentDescriptor",
    "FilePayload",
    "Page",
    "PageRequest",
    "Post",
    "PostInput",
    "ProfileUpdate",
    "SearchKind",
    # Errors
    "PostboardError",
    "IdentityNotFound",
    "DuplicateIdentity",
    "PostNotFound",
    "Unauthenticated",
    "Forbidden",
    "EmptyAttachment",
    "ValidationFailed",
    "StorageIO",
    # Utils
    "generate_id",
    "utc_now",
]
