"""
Service wiring.

Builds every service once, from settings, with explicitly constructed
collaborators. Nothing here is global: the API keeps one ServiceProvider
on `app.state`, tests build their own.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from postboard.auth.passwords import CredentialService
from postboard.auth.principal import StaticRoleResolver
from postboard.config import Settings, get_settings
from postboard.services.attachments import AttachmentManager
from postboard.services.identity import IdentityService
from postboard.services.posts import PostService
from postboard.storage.base import StorageProvider
from postboard.storage.local import create_local_storage


class ServiceProvider(BaseModel):
    """Container for the services a request handler needs."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    settings: Settings
    storage: StorageProvider
    identity: IdentityService
    posts: PostService


def create_services(
    settings: Settings | None = None,
    storage: StorageProvider | None = None,
) -> ServiceProvider:
    """Wire services for the given settings, on local storage by default."""
    settings = settings or get_settings()
    storage = storage or create_local_storage()

    credentials = CredentialService(iterations=settings.password_hash_iterations)
    roles = StaticRoleResolver(settings.admin_identifiers_set)
    attachments = AttachmentManager(settings.upload_dir, storage.files)

    return ServiceProvider(
        settings=settings,
        storage=storage,
        identity=IdentityService(storage.accounts, credentials, roles),
        posts=PostService(storage.posts, storage.accounts, attachments),
    )
