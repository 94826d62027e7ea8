"""
Tests for registration, principal loading, login and account mutation.
"""

import pytest

from postboard.auth.principal import Role
from postboard.core.errors import (
    DuplicateIdentity,
    Forbidden,
    IdentityNotFound,
    Unauthenticated,
    ValidationFailed,
)
from postboard.core.models import ProfileUpdate


class TestRegister:
    def test_register_hashes_password(self, identity, credentials):
        account = identity.register("alice", "pw1", "alice@example.com", "Alice", "memo")

        assert account.password_hash != "pw1"
        assert credentials.verify("pw1", account.password_hash)
        assert account.created_by == "alice"
        assert account.modified_by == "alice"

    def test_duplicate_identifier_rejected(self, identity, accounts):
        first = identity.register("alice", "pw1", "first@example.com")

        with pytest.raises(DuplicateIdentity):
            identity.register("alice", "other", "second@example.com")

        # Original row untouched
        stored = accounts.get("alice")
        assert stored.email == "first@example.com"
        assert stored.password_hash == first.password_hash

    @pytest.mark.parametrize("identifier,password", [("", "pw"), ("  ", "pw"), ("alice", "")])
    def test_blank_credentials_rejected(self, identity, identifier, password):
        with pytest.raises(ValidationFailed):
            identity.register(identifier, password)

    def test_hash_never_in_repr(self, identity):
        account = identity.register("alice", "pw1")
        assert account.password_hash not in repr(account)


class TestLoadPrincipal:
    def test_plain_user(self, identity, alice):
        assert alice.identifier == "alice"
        assert alice.roles == {Role.USER}
        assert alice.email == "alice@example.com"
        assert alice.nickname == "Alice"
        assert alice.memo == "hello"

    def test_admin_comes_from_resolver(self, admin):
        assert admin.is_administrator

    def test_unknown_identifier(self, identity):
        with pytest.raises(IdentityNotFound):
            identity.load_principal("ghost")


class TestAuthenticate:
    def test_success(self, identity, alice):
        principal = identity.authenticate("alice", "pw1")
        assert principal.identifier == "alice"

    def test_wrong_password(self, identity, alice):
        with pytest.raises(Unauthenticated):
            identity.authenticate("alice", "nope")

    def test_unknown_identifier(self, identity):
        with pytest.raises(Unauthenticated):
            identity.authenticate("ghost", "pw")


class TestUpdateProfile:
    def test_self_service(self, identity, alice, credentials):
        updated = identity.update_profile(
            alice, "alice",
            ProfileUpdate(password="pw-new", email="new@example.com", nickname="Al", memo="m"),
        )

        assert updated.email == "new@example.com"
        assert updated.nickname == "Al"
        assert updated.modified_by == "alice"
        assert updated.modified_at > updated.created_at
        assert credentials.verify("pw-new", updated.password_hash)
        assert identity.authenticate("alice", "pw-new")

    def test_admin_may_update_anyone(self, identity, alice, admin):
        updated = identity.update_profile(admin, "alice", ProfileUpdate(password="x", nickname="A"))
        assert updated.modified_by == "admin"

    def test_other_user_forbidden(self, identity, alice, bob):
        with pytest.raises(Forbidden):
            identity.update_profile(bob, "alice", ProfileUpdate(password="x"))

    def test_anonymous_unauthenticated(self, identity, alice):
        with pytest.raises(Unauthenticated):
            identity.update_profile(None, "alice", ProfileUpdate(password="x"))

    def test_missing_account(self, identity, admin):
        with pytest.raises(IdentityNotFound):
            identity.update_profile(admin, "ghost", ProfileUpdate(password="x"))

    def test_password_rehashed_even_when_blank(self, identity, alice, accounts, credentials):
        before = accounts.get("alice").password_hash

        updated = identity.update_profile(alice, "alice", ProfileUpdate(email="e@example.com"))

        assert updated.password_hash != before
        assert credentials.verify("", updated.password_hash)


class TestRemove:
    def test_self_removal(self, identity, alice, accounts):
        identity.remove(alice, "alice")
        assert accounts.get("alice") is None

    def test_other_user_forbidden(self, identity, alice, bob, accounts):
        with pytest.raises(Forbidden):
            identity.remove(bob, "alice")
        assert accounts.get("alice") is not None

    def test_missing_account(self, identity, admin):
        with pytest.raises(IdentityNotFound):
            identity.remove(admin, "ghost")
