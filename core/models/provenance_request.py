# =============================================================================
# core/models/provenance_request.py - Provenance Request Schemas
# =============================================================================
# These models define the API contract for the request/approval workflow:
# - ProvenanceRequestCreate: A non-owner proposes a change or asks for ownership
# - ProvenanceRequestReview: The current owner approves or denies
# - ProvenanceRequestResponse: A stored request, joined for presentation
#
# State machine (one-way, terminal once reviewed):
#     pending -> approved
#             \-> denied
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .artwork import ArtworkSummary, ProvenanceUpdateFields


class RequestType(str, Enum):
    """
    What the requester is asking for.

    - provenance_update: apply update_fields to the artwork
    - ownership_request: reassign the artwork's account_id to the requester
    """
    PROVENANCE_UPDATE = "provenance_update"
    OWNERSHIP_REQUEST = "ownership_request"


class RequestStatus(str, Enum):
    """Lifecycle of a request. Only PENDING can transition."""
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class ReviewAction(str, Enum):
    APPROVE = "approve"
    DENY = "deny"

    @property
    def resulting_status(self) -> RequestStatus:
        if self is ReviewAction.APPROVE:
            return RequestStatus.APPROVED
        return RequestStatus.DENIED


class ProvenanceRequestCreate(BaseModel):
    """
    Body for submitting a request against an artwork.

    update_fields is required (and must not be empty) for provenance_update;
    it is ignored for ownership_request.

    Example:
        {
            "request_type": "provenance_update",
            "update_fields": {"title": "New Title"},
            "request_message": "Title per the 1972 catalogue raisonne"
        }
    """

    request_type: RequestType = Field(
        default=RequestType.PROVENANCE_UPDATE,
        description="provenance_update or ownership_request"
    )

    update_fields: ProvenanceUpdateFields | None = Field(
        default=None,
        description="Proposed field values (provenance_update only)"
    )

    request_message: str | None = Field(
        default=None,
        max_length=2000,
        description="Optional note to the owner"
    )


class ProvenanceRequestReview(BaseModel):
    """
    Body for approving or denying a pending request.

    Example:
        {"action": "approve", "review_message": "Thanks, confirmed."}
    """

    action: ReviewAction = Field(..., description="approve or deny")

    review_message: str | None = Field(
        default=None,
        max_length=2000,
        description="Optional note back to the requester"
    )


class RequesterSummary(BaseModel):
    """Who filed a request, for display to the owner."""
    id: UUID | str
    name: str = "Unknown User"


class ProvenanceRequestResponse(BaseModel):
    """
    A stored provenance_update_requests row.

    artwork and requester are only populated by the listing operations.
    """

    id: UUID | str
    artwork_id: UUID | str
    requested_by: UUID | str
    request_type: RequestType = RequestType.PROVENANCE_UPDATE
    update_fields: dict[str, Any] = Field(default_factory=dict)
    request_message: str | None = None
    status: RequestStatus
    requested_at: datetime | None = None
    reviewed_by: UUID | str | None = None
    reviewed_at: datetime | None = None
    review_message: str | None = None

    artwork: ArtworkSummary | None = None
    requester: RequesterSummary | None = None

    @classmethod
    def from_db_row(
        cls,
        row: dict[str, Any],
        artwork: dict[str, Any] | None = None,
        requester: dict[str, Any] | None = None,
    ) -> "ProvenanceRequestResponse":
        """Build from a request row plus optional joined artwork/account rows."""
        data = dict(row)
        # Rows created before request_type existed are provenance updates
        data["request_type"] = data.get("request_type") or RequestType.PROVENANCE_UPDATE.value
        data["update_fields"] = data.get("update_fields") or {}

        if artwork is not None:
            data["artwork"] = ArtworkSummary(
                id=artwork.get("id") or row["artwork_id"],
                title=artwork.get("title") or "Unknown Artwork",
                image_url=artwork.get("image_url"),
            )
        if requester is not None:
            data["requester"] = RequesterSummary(
                id=requester.get("id") or row["requested_by"],
                name=requester.get("name") or "Unknown User",
            )
        return cls(**data)


class ProvenanceRequestList(BaseModel):
    """List envelope returned by the review and history endpoints."""

    requests: list[ProvenanceRequestResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
