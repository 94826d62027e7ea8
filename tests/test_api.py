"""
Tests for the HTTP layer: auth flow, error mapping and multipart posts.
"""

import inspect
from pathlib import Path

import pytest
from fastapi.routing import APIRoute

from postboard.api import create_app
from postboard.storage.local import create_local_storage


@pytest.fixture
def alice_headers(login):
    return login("alice", "pw1")


@pytest.fixture
def admin_headers(login):
    return login("admin", "root-pw")


def create_post(client, headers, title="Hi", content="World", file=None):
    files = {"file": file} if file else None
    return client.post("/posts", data={"title": title, "content": content}, files=files, headers=headers)


# =============================================================================
# Health & Auth
# =============================================================================


class TestAuthRoutes:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_register_hides_hash(self, client):
        response = client.post("/auth/register", json={
            "identifier": "alice",
            "password": "pw1",
            "email": "alice@example.com",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["identifier"] == "alice"
        assert "password_hash" not in body

    def test_duplicate_register_conflicts(self, client):
        payload = {"identifier": "alice", "password": "pw1"}
        client.post("/auth/register", json=payload)
        assert client.post("/auth/register", json=payload).status_code == 409

    def test_bad_login(self, client, alice_headers):
        response = client.post("/auth/login", json={"identifier": "alice", "password": "nope"})
        assert response.status_code == 401

    def test_me(self, client, alice_headers, admin_headers):
        assert client.get("/auth/me", headers=alice_headers).json()["roles"] == ["user"]
        assert client.get("/auth/me", headers=admin_headers).json()["roles"] == ["administrator", "user"]

    def test_me_anonymous(self, client):
        assert client.get("/auth/me").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_refresh(self, client):
        client.post("/auth/register", json={"identifier": "alice", "password": "pw1"})
        tokens = client.post("/auth/login", json={"identifier": "alice", "password": "pw1"}).json()

        response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        assert response.status_code == 200
        headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
        assert client.get("/auth/me", headers=headers).status_code == 200


class TestAccountRoutes:
    def test_self_update(self, client, alice_headers):
        response = client.put(
            "/accounts/alice",
            json={"password": "pw2", "nickname": "Al"},
            headers=alice_headers,
        )
        assert response.status_code == 200
        assert response.json()["nickname"] == "Al"

        login = client.post("/auth/login", json={"identifier": "alice", "password": "pw2"})
        assert login.status_code == 200

    def test_update_someone_else(self, client, alice_headers, login):
        login("bob", "pw")
        response = client.put("/accounts/bob", json={"password": "x"}, headers=alice_headers)
        assert response.status_code == 403

    def test_admin_deletes_account(self, client, alice_headers, admin_headers):
        assert client.delete("/accounts/alice", headers=admin_headers).status_code == 204
        assert client.delete("/accounts/alice", headers=admin_headers).status_code == 404


# =============================================================================
# Posts
# =============================================================================


class TestPostRoutes:
    def test_create_requires_auth(self, client):
        assert create_post(client, headers=None).status_code == 401

    def test_create_and_get(self, client, alice_headers):
        created = create_post(client, alice_headers)
        assert created.status_code == 201

        post = client.get(f"/posts/{created.json()['id']}").json()
        assert post["title"] == "Hi"
        assert post["owner_id"] == "alice"
        assert post["attachment"] is None

    @pytest.mark.parametrize("title,content", [("", "World"), ("   ", "World"), ("x" * 101, "World"), ("Hi", " ")])
    def test_validation(self, client, alice_headers, title, content):
        assert create_post(client, alice_headers, title, content).status_code == 400

    def test_empty_file(self, client, alice_headers):
        response = create_post(client, alice_headers, file=("empty.txt", b"", "text/plain"))
        assert response.status_code == 400
        assert client.get("/posts").json()["total"] == 0

    def test_upload_and_delete(self, client, alice_headers, admin_headers, upload_dir):
        created = create_post(client, alice_headers, file=("a.txt", b"hello", "text/plain")).json()
        path = Path(created["attachment"]["path"])
        assert path == upload_dir / "a.txt"
        assert path.read_bytes() == b"hello"

        assert client.delete(f"/posts/{created['id']}", headers=alice_headers).status_code == 403
        assert client.delete(f"/posts/{created['id']}", headers=admin_headers).status_code == 204

        assert client.get(f"/posts/{created['id']}").status_code == 404
        assert not path.exists()

    def test_update_is_admin_only(self, client, alice_headers, admin_headers):
        post_id = create_post(client, alice_headers).json()["id"]
        form = {"title": "Edited", "content": "World"}

        assert client.put(f"/posts/{post_id}", data=form, headers=alice_headers).status_code == 403

        response = client.put(f"/posts/{post_id}", data=form, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["title"] == "Edited"

    def test_update_missing(self, client, admin_headers):
        response = client.put("/posts/99", data={"title": "a", "content": "b"}, headers=admin_headers)
        assert response.status_code == 404

    def test_search(self, client, alice_headers):
        create_post(client, alice_headers, title="ABCdef")
        create_post(client, alice_headers, title="Other")

        page = client.get("/posts", params={"kind": "title", "keyword": "abc"}).json()
        assert [p["title"] for p in page["items"]] == ["ABCdef"]

        everything = client.get("/posts", params={"kind": "title", "keyword": ""}).json()
        assert everything["total"] == 2
        assert everything["size"] == 10

    def test_page_size_capped(self, client):
        assert client.get("/posts", params={"size": 1000}).json()["size"] == 50

    def test_bad_sort(self, client):
        assert client.get("/posts", params={"sort": "bogus"}).status_code == 400


# =============================================================================
# App Setup
# =============================================================================


class TestAppSetup:
    def test_blocking_handlers_run_in_threadpool(self, app):
        handlers = {
            route.path: route.endpoint
            for route in app.routes
            if isinstance(route, APIRoute) and route.path.startswith(("/posts", "/auth", "/accounts"))
        }

        assert "/auth/login" in handlers
        assert "/posts/{post_id}" in handlers
        assert not [path for path, fn in handlers.items() if inspect.iscoroutinefunction(fn)]

    def test_debug_follows_settings(self, settings):
        assert create_app(settings, create_local_storage()).debug is False

        debug_settings = settings.model_copy(update={"debug": True})
        assert create_app(debug_settings, create_local_storage()).debug is True
