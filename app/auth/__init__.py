# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication using Supabase Auth.
#
# Usage:
#   from app.auth import get_current_user_optional, AuthUser
#
#   @router.post("/artworks/{artwork_id}/requests")
#   async def submit(user: AuthUser | None = Depends(get_current_user_optional)):
#       ...
# =============================================================================

from app.auth.dependencies import get_current_user, get_current_user_optional
from app.auth.models import AccountResponse, AuthUser

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "AccountResponse",
    "AuthUser",
]
