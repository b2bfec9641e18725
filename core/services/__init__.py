# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .notification_service import NotificationService
from .provenance_service import OwnerAuthorization, ProvenanceService
from .provenance_request_service import ProvenanceRequestService

__all__ = [
    "NotificationService",
    "OwnerAuthorization",
    "ProvenanceService",
    "ProvenanceRequestService",
]
