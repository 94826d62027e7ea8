"""
FastAPI dependencies for authentication.

Route handlers get the caller as `Principal | None`. Whether that's good
enough is decided by the policy inside the services, not here.

    @app.post("/posts")
    async def create_post(
        principal: Principal | None = Depends(get_principal),
        services: ServiceProvider = Depends(get_services),
    ):
        ...
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from postboard.auth.principal import Principal
from postboard.auth.tokens import TokenError, decode_token
from postboard.core.errors import IdentityNotFound, Unauthenticated
from postboard.integrations.sentry import set_user
from postboard.services.provider import ServiceProvider


# Optional JWT bearer (doesn't fail if no token)
optional_bearer = HTTPBearer(auto_error=False)


def get_services(request: Request) -> ServiceProvider:
    return request.app.state.services


async def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    services: ServiceProvider = Depends(get_services),
) -> Principal | None:
    """
    Resolve the bearer token to a Principal.

    No token means anonymous (None). A token that doesn't validate, or
    names an account that no longer exists, is rejected with 401.
    """
    if not credentials:
        return None

    try:
        payload = decode_token(credentials.credentials, "access", services.settings)
        principal = services.identity.load_principal(payload.sub)
    except (TokenError, IdentityNotFound) as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_user(principal.identifier)
    return principal


async def require_principal(
    principal: Principal | None = Depends(get_principal),
) -> Principal:
    """Like get_principal, but anonymous callers get a 401."""
    if principal is None:
        raise Unauthenticated("Authentication required")
    return principal
