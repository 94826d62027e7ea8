"""
Policies - who may run which operation.

Every protected operation carries a tag. `authorize()` turns a principal,
an operation and (optionally) the owner of the target resource into an
Allow or a Deny. `enforce()` is the same check, raising on Deny.

Rules, in order:
1. Public operations (reads, searches) always pass.
2. Anything else needs a principal; anonymous callers are denied as
   UNAUTHENTICATED.
3. Authenticated-only operations pass for any principal.
4. Privileged operations pass for administrators, and for the resource
   owner only when the operation allows self-service.

Post mutation is administrator-only, even for the post's author. Account
mutation is administrator-or-self.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from postboard.auth.principal import Principal, Role
from postboard.core.errors import Forbidden, Unauthenticated


class Access(str, Enum):
    """How much an operation demands of the caller."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    PRIVILEGED = "privileged"


class Operation(str, Enum):
    """Operations that go through the policy."""

    POST_READ = "post.read"
    POST_SEARCH = "post.search"
    POST_CREATE = "post.create"
    POST_UPDATE = "post.update"
    POST_DELETE = "post.delete"

    ACCOUNT_UPDATE = "account.update"
    ACCOUNT_DELETE = "account.delete"

    @property
    def access(self) -> Access:
        return OPERATION_ACCESS[self]

    @property
    def allows_self_service(self) -> bool:
        return self in SELF_SERVICE_OPERATIONS


OPERATION_ACCESS: dict[Operation, Access] = {
    Operation.POST_READ: Access.PUBLIC,
    Operation.POST_SEARCH: Access.PUBLIC,
    Operation.POST_CREATE: Access.AUTHENTICATED,
    Operation.POST_UPDATE: Access.PRIVILEGED,
    Operation.POST_DELETE: Access.PRIVILEGED,
    Operation.ACCOUNT_UPDATE: Access.PRIVILEGED,
    Operation.ACCOUNT_DELETE: Access.PRIVILEGED,
}

# Privileged operations the resource owner may perform on their own resource
SELF_SERVICE_OPERATIONS: frozenset[Operation] = frozenset({
    Operation.ACCOUNT_UPDATE,
    Operation.ACCOUNT_DELETE,
})


# =============================================================================
# Decisions
# =============================================================================


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Decision:
    """Result of a policy check. `reason` is set only on deny."""

    allowed: bool
    reason: DenyReason | None = None
    message: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def deny(reason: DenyReason, message: str) -> Decision:
    return Decision(allowed=False, reason=reason, message=message)


# =============================================================================
# Main Interface
# =============================================================================


def authorize(
    principal: Principal | None,
    operation: Operation,
    resource_owner_id: str | None = None,
) -> Decision:
    """
    Decide whether `principal` may perform `operation`.

    Args:
        principal: The caller, or None for anonymous
        operation: What they want to do
        resource_owner_id: Owner of the target (post author, account id)
    """
    access = operation.access

    if access is Access.PUBLIC:
        return ALLOW

    if principal is None:
        return deny(DenyReason.UNAUTHENTICATED, "Authentication required")

    if access is Access.AUTHENTICATED:
        return ALLOW

    if principal.has_role(Role.ADMINISTRATOR):
        return ALLOW

    if (
        operation.allows_self_service
        and resource_owner_id is not None
        and principal.identifier == resource_owner_id
    ):
        return ALLOW

    return deny(
        DenyReason.FORBIDDEN,
        f"{principal.identifier} may not perform {operation.value}",
    )


def enforce(
    principal: Principal | None,
    operation: Operation,
    resource_owner_id: str | None = None,
) -> None:
    """
    Raise if `authorize()` denies.

    Raises:
        Unauthenticated: anonymous caller on a protected operation
        Forbidden: authenticated caller lacking the needed role/ownership
    """
    decision = authorize(principal, operation, resource_owner_id)
    if decision.allowed:
        return
    if decision.reason is DenyReason.UNAUTHENTICATED:
        raise Unauthenticated(decision.message)
    raise Forbidden(decision.message)
