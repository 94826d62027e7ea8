"""
Identity service - accounts and authentication.

Wraps the AccountStore with password hashing, principal resolution and
the administrator-or-self rule for account mutation.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from postboard.auth.passwords import CredentialService
from postboard.auth.policies import Operation, enforce
from postboard.auth.principal import DefaultRoleResolver, Principal, RoleResolver
from postboard.core.errors import IdentityNotFound, Unauthenticated, ValidationFailed
from postboard.core.models import Account, ProfileUpdate
from postboard.core.utils import is_blank, utc_now
from postboard.storage.base import AccountStore

logger = logging.getLogger(__name__)


class IdentityService:
    """
    Registration, lookup, profile changes and login.

    Example:
        identity = IdentityService(InMemoryAccountStore(), CredentialService())
        identity.register("alice", "pw1", "alice@example.com", "Alice", "")
        principal = identity.authenticate("alice", "pw1")
    """

    def __init__(
        self,
        accounts: AccountStore,
        credentials: CredentialService,
        roles: RoleResolver | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.accounts = accounts
        self.credentials = credentials
        self.roles = roles or DefaultRoleResolver()
        self.clock = clock

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def find_by_identifier(self, identifier: str) -> Account:
        account = self.accounts.get(identifier)
        if account is None:
            raise IdentityNotFound(identifier)
        return account

    def load_principal(self, identifier: str) -> Principal:
        """Build a fresh Principal for an account; roles come from the resolver."""
        account = self.find_by_identifier(identifier)
        return Principal.from_account(account, self.roles.roles_for(account))

    def authenticate(self, identifier: str, password: str) -> Principal:
        """
        Verify credentials and return the principal.

        Unknown identifier and wrong password fail the same way.
        """
        account = self.accounts.get(identifier)
        if account is None or not self.credentials.verify(password, account.password_hash):
            logger.info("Failed login for %s", identifier)
            raise Unauthenticated("Invalid identifier or password")
        return Principal.from_account(account, self.roles.roles_for(account))

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def register(
        self,
        identifier: str,
        password: str,
        email: str | None = None,
        nickname: str | None = None,
        memo: str | None = None,
    ) -> Account:
        """
        Create an account. The new account is its own creator.

        Raises:
            DuplicateIdentity: identifier already taken
            ValidationFailed: blank identifier or password
        """
        if is_blank(identifier):
            raise ValidationFailed("identifier: must not be blank")
        if is_blank(password):
            raise ValidationFailed("password: must not be blank")

        now = self.clock()
        account = Account(
            identifier=identifier,
            password_hash=self.credentials.hash(password),
            email=email,
            nickname=nickname,
            memo=memo,
            created_at=now,
            created_by=identifier,
            modified_at=now,
            modified_by=identifier,
        )
        self.accounts.add(account)
        logger.info("Registered account %s", identifier)
        return account

    def update_profile(
        self,
        principal: Principal | None,
        identifier: str,
        fields: ProfileUpdate,
    ) -> Account:
        """
        Replace an account's profile fields.

        The password is re-hashed on every call, whatever `fields.password`
        holds, including an empty string.
        """
        enforce(principal, Operation.ACCOUNT_UPDATE, identifier)
        account = self.find_by_identifier(identifier)

        # TODO: keep the stored hash when no password is given; today it becomes hash("")
        updated = account.with_profile(
            password_hash=self.credentials.hash(fields.password),
            email=fields.email,
            nickname=fields.nickname,
            memo=fields.memo,
            modified_by=principal.identifier,
            modified_at=self.clock(),
        )
        self.accounts.replace(updated)
        logger.info("Account %s updated by %s", identifier, principal.identifier)
        return updated

    def remove(self, principal: Principal | None, identifier: str) -> None:
        """Delete an account. Posts it owns are left in place."""
        enforce(principal, Operation.ACCOUNT_DELETE, identifier)
        self.accounts.delete(identifier)
        logger.info("Account %s removed by %s", identifier, principal.identifier)
