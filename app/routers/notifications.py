# =============================================================================
# app/routers/notifications.py - Notification Endpoints
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response

from app.auth import get_current_user, get_current_user_optional, AuthUser
from core.models.notification import NotificationList
from core.models.result import ActionResult
from core.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationList)
async def list_notifications(
    user: AuthUser = Depends(get_current_user),
    unread_only: Annotated[bool, Query(description="Only unread notifications")] = False,
    limit: Annotated[int, Query(ge=1, le=200, description="Max notifications")] = 50,
):
    """
    Your notifications, newest first.
    """
    return NotificationService.list_notifications(user, unread_only=unread_only, limit=limit)


@router.get("/unread-count")
async def unread_count(
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Number of unread notifications (0 when signed out).
    """
    return {"unread_count": NotificationService.get_unread_count(user)}


@router.post("/read-all", response_model=ActionResult)
async def mark_all_read(
    response: Response,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Mark all your notifications as read.
    """
    result = NotificationService.mark_all_as_read(user)
    response.status_code = result.status_code
    return result


@router.post("/{notification_id}/read", response_model=ActionResult)
async def mark_read(
    notification_id: Annotated[UUID, Path(description="Notification UUID")],
    response: Response,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Mark one of your notifications as read.
    """
    result = NotificationService.mark_as_read(notification_id, user)
    response.status_code = result.status_code
    return result
