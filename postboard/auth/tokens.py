# =============================================================================
# JWT Tokens
# =============================================================================
#
# Bearer tokens for the HTTP layer:
#   - Token creation (access + refresh)
#   - Token validation
#
# The token only carries the account identifier. Roles and profile are
# re-resolved from the identity store on every request.
#
# =============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from postboard.config import Settings, get_settings
from postboard.core.utils import generate_id, utc_now


# =============================================================================
# Models
# =============================================================================

class TokenPayload(BaseModel):
    """JWT token payload."""
    sub: str  # account identifier
    exp: datetime
    iat: datetime
    type: str  # "access" or "refresh"
    jti: str  # unique token ID


class TokenPair(BaseModel):
    """Access and refresh token pair."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until access token expires


# =============================================================================
# Errors
# =============================================================================

class TokenError(Exception):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid or malformed."""
    pass


# =============================================================================
# Token Creation
# =============================================================================

def _encode(identifier: str, token_type: str, lifetime: timedelta, settings: Settings) -> str:
    now = utc_now()
    payload = {
        "sub": identifier,
        "exp": now + lifetime,
        "iat": now,
        "type": token_type,
        "jti": generate_id("tok" if token_type == "access" else "rtok"),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(identifier: str, settings: Settings | None = None) -> str:
    """Create a JWT access token."""
    settings = settings or get_settings()
    lifetime = timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(identifier, "access", lifetime, settings)


def create_refresh_token(identifier: str, settings: Settings | None = None) -> str:
    """Create a JWT refresh token (longer-lived)."""
    settings = settings or get_settings()
    lifetime = timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(identifier, "refresh", lifetime, settings)


def create_token_pair(identifier: str, settings: Settings | None = None) -> TokenPair:
    """Create both access and refresh tokens."""
    settings = settings or get_settings()
    return TokenPair(
        access_token=create_access_token(identifier, settings),
        refresh_token=create_refresh_token(identifier, settings),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


# =============================================================================
# Token Validation
# =============================================================================

def decode_token(
    token: str,
    expected_type: str = "access",
    settings: Settings | None = None,
) -> TokenPayload:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT string
        expected_type: "access" or "refresh"

    Returns:
        TokenPayload with validated claims

    Raises:
        TokenExpiredError: Token has expired
        TokenInvalidError: Token is invalid
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {e}")

    if payload.get("type") != expected_type:
        raise TokenInvalidError(f"Expected {expected_type} token, got {payload.get('type')}")

    try:
        return TokenPayload(
            sub=payload["sub"],
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            type=payload["type"],
            jti=payload.get("jti", ""),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise TokenInvalidError(f"Invalid token claims: {e}")


def refresh_tokens(refresh_token: str, settings: Settings | None = None) -> TokenPair:
    """Use a refresh token to get a new access and refresh token pair."""
    payload = decode_token(refresh_token, expected_type="refresh", settings=settings)
    return create_token_pair(payload.sub, settings)
