# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - artwork.py: Provenance patches and artwork summaries
# - provenance_request.py: Request/approval workflow schemas
# - notification.py: Notification schemas
# - result.py: Uniform {success, error} operation result
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Artwork Models - Provenance patches
# -----------------------------------------------------------------------------
from .artwork import (
    PROVENANCE_FIELD_NAMES,
    VISIBILITY_FLAG_NAMES,
    ArtworkSummary,
    ProvenanceEdit,
    ProvenanceUpdateFields,
)

# -----------------------------------------------------------------------------
# Request Models - Approval workflow
# -----------------------------------------------------------------------------
from .provenance_request import (
    ProvenanceRequestCreate,
    ProvenanceRequestList,
    ProvenanceRequestResponse,
    ProvenanceRequestReview,
    RequesterSummary,
    RequestStatus,
    RequestType,
    ReviewAction,
)

# -----------------------------------------------------------------------------
# Notification Models
# -----------------------------------------------------------------------------
from .notification import (
    NotificationCreate,
    NotificationList,
    NotificationResponse,
    NotificationType,
)

# -----------------------------------------------------------------------------
# Result Model
# -----------------------------------------------------------------------------
from .result import ActionResult

__all__ = [
    # Artwork
    "PROVENANCE_FIELD_NAMES",
    "VISIBILITY_FLAG_NAMES",
    "ArtworkSummary",
    "ProvenanceEdit",
    "ProvenanceUpdateFields",
    # Requests
    "ProvenanceRequestCreate",
    "ProvenanceRequestList",
    "ProvenanceRequestResponse",
    "ProvenanceRequestReview",
    "RequesterSummary",
    "RequestStatus",
    "RequestType",
    "ReviewAction",
    # Notifications
    "NotificationCreate",
    "NotificationList",
    "NotificationResponse",
    "NotificationType",
    # Result
    "ActionResult",
]
