"""
Authentication and authorization.

- passwords: CredentialService (hash / verify)
- principal: Principal, Role, role resolvers
- policies: authorize() / enforce() per operation
- tokens: JWT access/refresh tokens for the HTTP layer

FastAPI wiring lives in auth.dependencies and auth.routes.
"""

from postboard.auth.passwords import CredentialService
from postboard.auth.principal import (
    Principal,
    Role,
    RoleResolver,
    DefaultRoleResolver,
    StaticRoleResolver,
)
from postboard.auth.policies import (
    Access,
    Decision,
    DenyReason,
    Operation,
    authorize,
    enforce,
)
from postboard.auth.tokens import (
    TokenPair,
    TokenError,
    create_token_pair,
    decode_token,
)

__all__ = [
    # Credentials
    "CredentialService",
    # Principal
    "Principal",
    "Role",
    "RoleResolver",
    "DefaultRoleResolver",
    "StaticRoleResolver",
    # Policy
    "Access",
    "Decision",
    "DenyReason",
    "Operation",
    "authorize",
    "enforce",
    # JWT
    "TokenPair",
    "TokenError",
    "create_token_pair",
    "decode_token",
]
