"""Shared fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from postboard.api import create_app
from postboard.auth.passwords import CredentialService
from postboard.auth.principal import Role, StaticRoleResolver
from postboard.config import Settings
from postboard.services.attachments import AttachmentManager
from postboard.services.identity import IdentityService
from postboard.services.posts import PostService
from postboard.storage.local import (
    InMemoryAccountStore,
    InMemoryPostStore,
    LocalFileSystem,
    create_local_storage,
)


class FakeClock:
    """Deterministic clock; each call advances one second."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class FailingFileSystem(LocalFileSystem):
    """Local filesystem whose writes and/or deletes blow up."""

    def __init__(self, fail_write: bool = False, fail_delete: bool = False):
        self.fail_write = fail_write
        self.fail_delete = fail_delete

    def write(self, data: bytes, path: Path) -> None:
        if self.fail_write:
            raise OSError("disk full")
        super().write(data, path)

    def delete_if_exists(self, path: Path) -> bool:
        if self.fail_delete:
            raise PermissionError("read-only filesystem")
        return super().delete_if_exists(path)


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def credentials():
    # Low iteration count keeps the suite fast
    return CredentialService(iterations=1_000)


@pytest.fixture
def accounts():
    return InMemoryAccountStore()


@pytest.fixture
def post_store():
    return InMemoryPostStore()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def attachments(upload_dir):
    return AttachmentManager(upload_dir)


@pytest.fixture
def failing_attachments(upload_dir):
    """Factory for an AttachmentManager over a FailingFileSystem."""

    def make(fail_write: bool = False, fail_delete: bool = False) -> AttachmentManager:
        return AttachmentManager(upload_dir, FailingFileSystem(fail_write, fail_delete))

    return make


@pytest.fixture
def identity(accounts, credentials, clock):
    return IdentityService(accounts, credentials, StaticRoleResolver({"admin"}), clock=clock)


@pytest.fixture
def post_service(post_store, accounts, attachments, clock):
    return PostService(post_store, accounts, attachments, clock=clock)


@pytest.fixture
def alice(identity):
    """A registered plain user."""
    identity.register("alice", "pw1", "alice@example.com", "Alice", "hello")
    return identity.load_principal("alice")


@pytest.fixture
def bob(identity):
    identity.register("bob", "pw2", "bob@example.com", "Bob", "")
    return identity.load_principal("bob")


@pytest.fixture
def admin(identity):
    """A registered account provisioned as administrator."""
    identity.register("admin", "root-pw", "admin@example.com", "Admin", "")
    principal = identity.load_principal("admin")
    assert Role.ADMINISTRATOR in principal.roles
    return principal


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def settings(upload_dir):
    return Settings(
        _env_file=None,
        upload_dir=str(upload_dir),
        admin_identifiers="admin",
        password_hash_iterations=1_000,
        jwt_secret_key="test-secret-0123456789abcdef0123456789",
        default_page_size=10,
        max_page_size=50,
    )


@pytest.fixture
def app(settings):
    return create_app(settings, create_local_storage())


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(client):
    """Register an account over HTTP and return auth headers for it."""

    def register_and_login(identifier: str, password: str) -> dict:
        client.post("/auth/register", json={"identifier": identifier, "password": password})
        response = client.post("/auth/login", json={"identifier": identifier, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return register_and_login
