"""
Principal - the authenticated subject of a request.

A Principal is derived from a stored Account every time someone
authenticates. It is never persisted. Roles come from a RoleResolver so
that administrator provisioning can change without touching the policy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from postboard.core.models import Account


class Role(str, Enum):
    """Platform-wide roles. Every principal has at least USER."""

    USER = "user"
    ADMINISTRATOR = "administrator"


@dataclass(frozen=True)
class Principal:
    """
    Who is making the request and what roles they hold.

    Usage:
        if principal.is_administrator:
            ...
    """

    identifier: str
    password_hash: str = field(default="", repr=False)
    roles: frozenset[Role] = frozenset({Role.USER})
    email: str | None = None
    nickname: str | None = None
    memo: str | None = None

    def __post_init__(self):
        # Always carry the base role, even if a resolver forgot it
        if Role.USER not in self.roles:
            object.__setattr__(self, "roles", frozenset(self.roles) | {Role.USER})

    def has_role(self, role: Role | str) -> bool:
        if isinstance(role, str):
            try:
                role = Role(role)
            except ValueError:
                return False
        return role in self.roles

    @property
    def is_administrator(self) -> bool:
        return Role.ADMINISTRATOR in self.roles

    @classmethod
    def from_account(cls, account: Account, roles: Iterable[Role]) -> Principal:
        return cls(
            identifier=account.identifier,
            password_hash=account.password_hash,
            roles=frozenset(roles),
            email=account.email,
            nickname=account.nickname,
            memo=account.memo,
        )


# =============================================================================
# Role Resolution
# =============================================================================


class RoleResolver(ABC):
    """Decides which roles an account holds."""

    @abstractmethod
    def roles_for(self, account: Account) -> frozenset[Role]:
        pass


class DefaultRoleResolver(RoleResolver):
    """Everyone is a plain user."""

    def roles_for(self, account: Account) -> frozenset[Role]:
        return frozenset({Role.USER})


class StaticRoleResolver(RoleResolver):
    """
    Administrators are a fixed list of identifiers from configuration.

    Nothing stored on the account can grant the administrator role.
    """

    def __init__(self, admin_identifiers: Iterable[str] = ()):
        self.admin_identifiers = frozenset(admin_identifiers)

    def roles_for(self, account: Account) -> frozenset[Role]:
        if account.identifier in self.admin_identifiers:
            return frozenset({Role.USER, Role.ADMINISTRATOR})
        return frozenset({Role.USER})
