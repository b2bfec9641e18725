# =============================================================================
# app/routers/artworks.py - Direct Provenance Edit Endpoints
# =============================================================================
# Owner-only edits of an artwork's provenance record.
# Non-owners go through /artworks/{id}/requests instead.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response
from pydantic import BaseModel, Field

from app.auth import get_current_user_optional, AuthUser
from core.models.artwork import ProvenanceEdit
from core.models.result import ActionResult
from core.services.provenance_service import ProvenanceService

router = APIRouter()


class BatchProvenanceEditRequest(BaseModel):
    """Apply one edit to several artworks you own."""
    artwork_ids: list[UUID] = Field(..., min_length=1)
    edit: ProvenanceEdit

    model_config = {
        "json_schema_extra": {
            "example": {
                "artwork_ids": ["550e8400-e29b-41d4-a716-446655440000"],
                "edit": {"artist_name": "Hilma af Klint", "value_is_public": False},
            }
        }
    }


# Registered before /{artwork_id}/provenance so "provenance" isn't parsed as an id
@router.patch("/artworks/provenance/batch", response_model=ActionResult)
async def batch_update_provenance(
    request: BatchProvenanceEditRequest,
    response: Response,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Edit provenance on many artworks at once.

    Every artwork must be yours. Artworks are updated one at a time;
    updated_count reports how many succeeded.
    """
    result = ProvenanceService.batch_update_provenance(request.artwork_ids, request.edit, user)
    response.status_code = result.status_code
    return result


@router.patch("/artworks/{artwork_id}/provenance", response_model=ActionResult)
async def update_provenance(
    artwork_id: Annotated[UUID, Path(description="Artwork UUID")],
    edit: ProvenanceEdit,
    response: Response,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Edit your artwork's provenance.

    Only the fields you send are changed; send null or "" to clear one.
    """
    result = ProvenanceService.update_provenance(artwork_id, edit, user, notify=False)
    response.status_code = result.status_code
    return result
