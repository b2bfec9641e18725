# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Turns a Supabase access token into an AuthUser.
#
# Supports both:
# - ES256 (Supabase JWT signing keys) via the project's JWKS endpoint
# - HS256 (legacy Supabase JWT secret)
#
# Workflow routes use get_current_user_optional and let the service layer
# report "authentication required" through its uniform result; read-only
# account routes use get_current_user and fail with 401 directly.
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser, TokenPayload

logger = logging.getLogger(__name__)

# HTTP Bearer token extractors
security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)

JWKS_CACHE_TTL = 3600  # 1 hour
TOKEN_AUDIENCE = "authenticated"


class _JWKSCache:
    """Keys from <SUPABASE_URL>/auth/v1/.well-known/jwks.json, refreshed hourly."""

    def __init__(self) -> None:
        self.keys: list[dict[str, Any]] = []
        self.fetched_at: float = 0

    @property
    def url(self) -> str:
        return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"

    def get(self, kid: str) -> dict[str, Any] | None:
        if not self.keys or (time.time() - self.fetched_at) >= JWKS_CACHE_TTL:
            self._refresh()
        for key in self.keys:
            if key.get("kid") == kid:
                return key
        return None

    def _refresh(self) -> None:
        try:
            response = httpx.get(self.url, timeout=10)
            response.raise_for_status()
            self.keys = response.json().get("keys", [])
            self.fetched_at = time.time()
            logger.debug(f"Fetched {len(self.keys)} signing keys from {self.url}")
        except httpx.HTTPError as e:
            # Keep serving stale keys if we have any
            logger.warning(f"Failed to fetch JWKS: {e}")


_jwks = _JWKSCache()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _signing_key(token: str) -> tuple[Any, str]:
    """
    Pick the key and algorithm to verify a token with.

    Returns:
        Tuple of (key, algorithm)

    Raises:
        HTTPException: 401 if the token would be checked against an empty secret
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        header = {}

    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg != "HS256" and kid:
        key = _jwks.get(kid)
        if key is not None:
            return key, alg
        logger.warning(f"No JWKS key for alg={alg}, kid={kid}; falling back to HS256")

    # An empty HMAC key would accept tokens anyone can sign
    if not settings.SUPABASE_JWT_SECRET:
        logger.error("SUPABASE_JWT_SECRET is empty; refusing HS256 verification")
        raise _unauthorized("Token verification is not configured")

    return settings.SUPABASE_JWT_SECRET, "HS256"


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return its user.

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no user id
    """
    key, algorithm = _signing_key(token)

    try:
        payload = TokenPayload(
            **jwt.decode(token, key, algorithms=[algorithm], audience=TOKEN_AUDIENCE)
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")
    except ValueError:
        logger.warning("JWT payload missing required claims")
        raise _unauthorized("Invalid token: missing claims")

    try:
        user_id = UUID(payload.sub)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {payload.sub}")
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_id, email=payload.email)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Require a valid Bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    user = decode_access_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> Optional[AuthUser]:
    """
    The signed-in user, or None if no usable token was sent.

    An invalid or expired token is treated the same as no token.
    """
    if credentials is None:
        return None

    try:
        return decode_access_token(credentials.credentials)
    except HTTPException:
        return None
