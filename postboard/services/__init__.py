"""Services - identity, attachments and the post lifecycle."""

from postboard.services.identity import IdentityService
from postboard.services.attachments import AttachmentManager
from postboard.services.posts import PostService

__all__ = [
    "IdentityService",
    "AttachmentManager",
    "PostService",
]
