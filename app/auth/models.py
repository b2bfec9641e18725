# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for the identity supplied by Supabase Auth.
# =============================================================================

from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel


class UserRole(str, Enum):
    """Role an account picked for itself, stored in accounts.public_data.role."""
    COLLECTOR = "collector"
    ARTIST = "artist"
    GALLERY = "gallery"


def get_user_role(public_data: Optional[dict[str, Any]]) -> Optional[UserRole]:
    """The account's role, or None if unset or unknown."""
    try:
        return UserRole((public_data or {}).get("role"))
    except ValueError:
        return None


class AuthUser(BaseModel):
    """
    Authenticated user extracted from a Supabase JWT.

    Every mutation in the provenance workflow is attributed to this id
    (requested_by, reviewed_by, updated_by).
    """
    id: UUID
    email: Optional[str] = None

    model_config = {"frozen": True}


class AccountResponse(BaseModel):
    """
    The caller's account row from public.accounts.

    name is what owners see next to incoming requests and what ownership
    requests are matched against the artwork's artist_name.
    """
    id: UUID
    email: Optional[str] = None
    name: Optional[str] = None
    public_data: dict[str, Any] = {}


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: Optional[int] = None
    role: Optional[str] = None
