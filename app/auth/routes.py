# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Signup/login is handled by Supabase Auth client-side.
# These routes expose who the current token belongs to.
# =============================================================================

import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AccountResponse, AuthUser
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=AccountResponse)
async def get_current_account(
    user: AuthUser = Depends(get_current_user)
) -> AccountResponse:
    """
    Get the current user's account.

    Falls back to the token's id/email when the accounts row
    hasn't been created yet.
    """
    try:
        account = SupabaseClient.fetch_account(user.id)
    except SupabaseClientError as e:
        logger.warning(f"Could not fetch account: {e}")
        account = None

    if account:
        return AccountResponse(
            id=user.id,
            email=user.email,
            name=account.get("name"),
            public_data=account.get("public_data") or {},
        )

    return AccountResponse(id=user.id, email=user.email)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Check that the current token is valid.
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
