# =============================================================================
# Auth & Account API Routes
# =============================================================================
#
# Endpoints:
#   POST   /auth/register           - Create account
#   POST   /auth/login              - Get tokens
#   POST   /auth/refresh            - Refresh tokens
#   GET    /auth/me                 - Get current account
#   PUT    /accounts/{identifier}   - Update profile (administrator or self)
#   DELETE /accounts/{identifier}   - Remove account (administrator or self)
#
# =============================================================================

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, EmailStr, Field

from postboard.auth.dependencies import get_principal, get_services, require_principal
from postboard.auth.principal import Principal
from postboard.auth.tokens import (
    TokenExpiredError,
    TokenInvalidError,
    TokenPair,
    create_token_pair,
    refresh_tokens,
)
from postboard.core.models import Account, ProfileUpdate
from postboard.services.provider import ServiceProvider

router = APIRouter(prefix="/auth", tags=["auth"])
accounts_router = APIRouter(prefix="/accounts", tags=["accounts"])


# =============================================================================
# Request/Response Models
# =============================================================================

class RegisterRequest(BaseModel):
    identifier: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)
    email: EmailStr | None = None
    nickname: str | None = Field(default=None, max_length=100)
    memo: str | None = None


class LoginRequest(BaseModel):
    identifier: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class ProfileRequest(BaseModel):
    password: str = ""
    email: EmailStr | None = None
    nickname: str | None = Field(default=None, max_length=100)
    memo: str | None = None


class AccountResponse(BaseModel):
    """Account data returned to clients (no password hash)."""
    identifier: str
    email: str | None
    nickname: str | None
    memo: str | None
    roles: list[str] = Field(default_factory=list)
    created_at: datetime
    created_by: str
    modified_at: datetime
    modified_by: str

    @classmethod
    def from_account(cls, account: Account, principal: Principal | None = None) -> AccountResponse:
        return cls(
            identifier=account.identifier,
            email=account.email,
            nickname=account.nickname,
            memo=account.memo,
            roles=sorted(r.value for r in principal.roles) if principal else [],
            created_at=account.created_at,
            created_by=account.created_by,
            modified_at=account.modified_at,
            modified_by=account.modified_by,
        )


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/register", response_model=AccountResponse, status_code=201)
def register(
    data: RegisterRequest,
    services: ServiceProvider = Depends(get_services),
):
    """Create a new account."""
    account = services.identity.register(
        data.identifier,
        data.password,
        email=data.email,
        nickname=data.nickname,
        memo=data.memo,
    )
    return AccountResponse.from_account(account)


@router.post("/login", response_model=TokenPair)
def login(
    data: LoginRequest,
    services: ServiceProvider = Depends(get_services),
):
    """Authenticate and get tokens."""
    principal = services.identity.authenticate(data.identifier, data.password)
    return create_token_pair(principal.identifier, services.settings)


@router.post("/refresh", response_model=TokenPair)
def refresh(
    data: RefreshRequest,
    services: ServiceProvider = Depends(get_services),
):
    """Use refresh token to get new access token."""
    try:
        return refresh_tokens(data.refresh_token, services.settings)
    except TokenExpiredError:
        raise HTTPException(status_code=401, detail="Refresh token expired, please login again")
    except TokenInvalidError as e:
        raise HTTPException(status_code=401, detail=str(e))


# =============================================================================
# Authenticated Endpoints
# =============================================================================

@router.get("/me", response_model=AccountResponse)
def me(
    principal: Principal = Depends(require_principal),
    services: ServiceProvider = Depends(get_services),
):
    """Get the current account."""
    account = services.identity.find_by_identifier(principal.identifier)
    return AccountResponse.from_account(account, principal)


@accounts_router.put("/{identifier}", response_model=AccountResponse)
def update_account(
    identifier: str,
    data: ProfileRequest,
    principal: Principal | None = Depends(get_principal),
    services: ServiceProvider = Depends(get_services),
):
    """Replace profile fields. The password is always re-hashed."""
    account = services.identity.update_profile(
        principal,
        identifier,
        ProfileUpdate(**data.model_dump()),
    )
    return AccountResponse.from_account(account)


@accounts_router.delete("/{identifier}", status_code=204)
def delete_account(
    identifier: str,
    principal: Principal | None = Depends(get_principal),
    services: ServiceProvider = Depends(get_services),
):
    """Remove an account."""
    services.identity.remove(principal, identifier)
    return Response(status_code=204)
