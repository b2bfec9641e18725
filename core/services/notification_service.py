# =============================================================================
# core/services/notification_service.py - Notification Sink
# =============================================================================
# Writes and reads user notifications.
#
# Workflow services call notify_safely(): a notification is never allowed to
# fail the operation that triggered it. The request or artwork row is the
# source of truth; a lost notification is logged and forgotten.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.notification import (
    NotificationCreate,
    NotificationList,
    NotificationResponse,
    NotificationType,
)
from core.models.result import ActionResult
from app.auth.models import AuthUser
from app.exceptions import (
    AuthenticationRequiredError,
    DataStoreError,
    NotificationNotFoundError,
    ProvenanceAPIException,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Service for creating and reading notifications.
    """

    @staticmethod
    def create_notification(notification: NotificationCreate) -> dict[str, Any]:
        """
        Insert a notification.

        Returns:
            The inserted row

        Raises:
            SupabaseClientError: If the insert fails
        """
        row = SupabaseClient.insert_notification(notification.to_db_row())
        logger.debug(
            f"Created {notification.type.value} notification for user {notification.user_id}"
        )
        return row

    @staticmethod
    def notify_safely(
        user_id: UUID | str,
        type: NotificationType,
        title: str,
        message: str | None = None,
        artwork_id: UUID | str | None = None,
        related_user_id: UUID | str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """
        Create a notification, logging and swallowing any failure.

        Returns:
            True if the notification was stored
        """
        try:
            NotificationService.create_notification(
                NotificationCreate(
                    user_id=user_id,
                    type=type,
                    title=title,
                    message=message,
                    artwork_id=artwork_id,
                    related_user_id=related_user_id,
                    metadata=metadata or {},
                )
            )
            return True
        except Exception as e:
            logger.warning(f"Failed to create {type.value} notification for user {user_id}: {e}")
            return False

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    @staticmethod
    def list_notifications(
        user: AuthUser | None,
        unread_only: bool = False,
        limit: int = 50,
    ) -> NotificationList:
        """
        A user's notifications (newest first) with their unread count.

        Raises:
            AuthenticationRequiredError: If no user is signed in
            DataStoreError: If the query fails
        """
        if user is None:
            raise AuthenticationRequiredError()

        try:
            rows = SupabaseClient.fetch_notifications(user.id, unread_only=unread_only, limit=limit)
        except SupabaseClientError as e:
            logger.error(f"Failed to list notifications: {e}")
            raise DataStoreError("Failed to load notifications", e.message)

        return NotificationList(
            notifications=[NotificationResponse(**row) for row in rows],
            unread_count=NotificationService.get_unread_count(user),
        )

    @staticmethod
    def get_unread_count(user: AuthUser | None) -> int:
        """Unread notification count; 0 when signed out or on failure."""
        if user is None:
            return 0
        try:
            return SupabaseClient.count_unread_notifications(user.id)
        except SupabaseClientError as e:
            logger.error(f"Error getting notification count: {e}")
            return 0

    # -------------------------------------------------------------------------
    # Marking read
    # -------------------------------------------------------------------------

    @staticmethod
    def mark_as_read(notification_id: UUID | str, user: AuthUser | None) -> ActionResult:
        """Mark one of the caller's own notifications as read."""
        try:
            if user is None:
                raise AuthenticationRequiredError()
            try:
                rows = SupabaseClient.mark_notifications_read(user.id, notification_id)
            except SupabaseClientError as e:
                logger.error(f"Error marking notification as read: {e}")
                raise DataStoreError("Failed to mark notification as read", e.message)
            if not rows:
                raise NotificationNotFoundError(str(notification_id))
            return ActionResult.ok({"notification_id": str(notification_id)})
        except ProvenanceAPIException as e:
            return ActionResult.failure(e)

    @staticmethod
    def mark_all_as_read(user: AuthUser | None) -> ActionResult:
        """Mark every unread notification of the caller as read."""
        try:
            if user is None:
                raise AuthenticationRequiredError()
            try:
                rows = SupabaseClient.mark_notifications_read(user.id)
            except SupabaseClientError as e:
                logger.error(f"Error marking all notifications as read: {e}")
                raise DataStoreError("Failed to mark notifications as read", e.message)
            return ActionResult.ok(updated_count=len(rows))
        except ProvenanceAPIException as e:
            return ActionResult.failure(e)
