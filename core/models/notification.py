# =============================================================================
# core/models/notification.py - Notification Schemas
# =============================================================================
# Notifications are rows in the notifications table addressed to one user.
# They are written best-effort by the workflow services and read by clients.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """Every kind of notification the platform emits."""
    CERTIFICATE_CLAIM_REQUEST = "certificate_claim_request"
    CERTIFICATE_CLAIMED = "certificate_claimed"
    CERTIFICATE_VERIFIED = "certificate_verified"
    CERTIFICATE_REJECTED = "certificate_rejected"
    ARTWORK_UPDATED = "artwork_updated"
    QR_CODE_SCANNED = "qr_code_scanned"
    PROVENANCE_UPDATE_REQUEST = "provenance_update_request"
    PROVENANCE_UPDATE_APPROVED = "provenance_update_approved"
    PROVENANCE_UPDATE_DENIED = "provenance_update_denied"
    OWNERSHIP_REQUEST = "ownership_request"
    OWNERSHIP_APPROVED = "ownership_approved"
    OWNERSHIP_DENIED = "ownership_denied"
    MESSAGE = "message"


class NotificationCreate(BaseModel):
    """
    Input for NotificationService.create_notification.

    Example:
        NotificationCreate(
            user_id=owner_id,
            type=NotificationType.OWNERSHIP_REQUEST,
            title="Ownership Request: Untitled",
            artwork_id=artwork_id,
            related_user_id=requester_id,
        )
    """

    user_id: UUID | str
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=500)
    message: str | None = None
    artwork_id: UUID | str | None = None
    related_user_id: UUID | str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_db_row(self) -> dict[str, Any]:
        return {
            "user_id": str(self.user_id),
            "type": self.type.value,
            "title": self.title,
            "message": self.message or None,
            "artwork_id": str(self.artwork_id) if self.artwork_id else None,
            "related_user_id": str(self.related_user_id) if self.related_user_id else None,
            "metadata": self.metadata,
        }


class NotificationResponse(BaseModel):
    """A stored notification."""

    id: UUID | str
    user_id: UUID | str
    type: NotificationType
    title: str
    message: str | None = None
    artwork_id: UUID | str | None = None
    related_user_id: UUID | str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    read: bool = False
    created_at: datetime | None = None


class NotificationList(BaseModel):
    notifications: list[NotificationResponse] = Field(default_factory=list)
    unread_count: int = Field(default=0, ge=0)
