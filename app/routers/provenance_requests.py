# =============================================================================
# app/routers/provenance_requests.py - Request/Approval Endpoints
# =============================================================================
# Thin HTTP layer over ProvenanceRequestService.
# Mutations return the service's ActionResult body with the HTTP status it
# carries (200 on success).
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response

from app.auth import get_current_user_optional, AuthUser
from core.models.provenance_request import (
    ProvenanceRequestCreate,
    ProvenanceRequestList,
    ProvenanceRequestResponse,
    ProvenanceRequestReview,
    RequestStatus,
)
from core.models.result import ActionResult
from core.services.provenance_request_service import ProvenanceRequestService

router = APIRouter()


@router.post("/artworks/{artwork_id}/requests", response_model=ActionResult)
async def submit_request(
    artwork_id: Annotated[UUID, Path(description="Artwork UUID")],
    request: ProvenanceRequestCreate,
    response: Response,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Propose a provenance update or request ownership of an artwork.

    The artwork's owner is notified and reviews the request in their portal.
    Fails if you own the artwork or already have a pending request for it.
    """
    result = ProvenanceRequestService.submit_request(artwork_id, user, request)
    response.status_code = result.status_code
    return result


@router.get("/requests/pending", response_model=ProvenanceRequestList)
async def list_pending_requests(
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Pending requests for artworks you currently own, newest first.
    """
    return ProvenanceRequestService.list_pending_requests_for_owner(user)


@router.get("/requests/mine", response_model=ProvenanceRequestList)
async def list_my_requests(
    user: AuthUser | None = Depends(get_current_user_optional),
    status: Annotated[RequestStatus | None, Query(description="Filter by status")] = None,
):
    """
    Requests you have submitted, with their review outcome.
    """
    return ProvenanceRequestService.list_requests_for_requester(user, status=status)


@router.get("/requests/{request_id}", response_model=ProvenanceRequestResponse)
async def get_request(
    request_id: Annotated[UUID, Path(description="Request UUID")],
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    A single request. Visible to the requester and the artwork's current owner.
    """
    return ProvenanceRequestService.get_request(request_id, user)


@router.post("/requests/{request_id}/respond", response_model=ActionResult)
async def respond_to_request(
    request_id: Annotated[UUID, Path(description="Request UUID")],
    review: ProvenanceRequestReview,
    response: Response,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Approve or deny a pending request on an artwork you own.

    Approving an ownership request transfers the artwork to the requester.
    Approving a provenance update applies the proposed fields.
    """
    result = ProvenanceRequestService.respond_to_request(
        request_id,
        user,
        review.action,
        review_message=review.review_message,
    )
    response.status_code = result.status_code
    return result
