# =============================================================================
# core/models/artwork.py - Artwork Provenance Schemas
# =============================================================================
# These models describe partial updates to an artwork's provenance record:
# - ProvenanceUpdateFields: The patch a non-owner may propose in a request
# - ProvenanceEdit: The patch an owner may apply directly (adds visibility flags)
# - ArtworkSummary: Minimal artwork info for presentation joins
#
# A patch only touches the keys that were explicitly sent. Sending null or an
# empty string clears the column; omitting a key leaves it untouched.
# Unknown keys are rejected here, at write time, never silently dropped later.
# =============================================================================

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


# Columns a provenance patch may touch, in display order
PROVENANCE_FIELD_NAMES: tuple[str, ...] = (
    "title",
    "description",
    "artist_name",
    "medium",
    "creation_date",
    "dimensions",
    "former_owners",
    "auction_history",
    "exhibition_history",
    "historic_context",
    "celebrity_notes",
    "value",
    "edition",
    "production_location",
    "owned_by",
    "sold_by",
)

VISIBILITY_FLAG_NAMES: tuple[str, ...] = (
    "is_public",
    "value_is_public",
    "owned_by_is_public",
    "sold_by_is_public",
)


class ProvenanceUpdateFields(BaseModel):
    """
    Partial update of an artwork's provenance text fields.

    Stored as-is in provenance_update_requests.update_fields and applied
    on approval.

    Example:
        {
            "title": "Untitled (Blue)",
            "former_owners": "Private collection, Zurich"
        }
    """

    title: str | None = Field(default=None, max_length=500)
    description: str | None = None
    artist_name: str | None = Field(default=None, max_length=255)
    medium: str | None = None
    creation_date: str | None = None
    dimensions: str | None = None
    former_owners: str | None = None
    auction_history: str | None = None
    exhibition_history: str | None = None
    historic_context: str | None = None
    celebrity_notes: str | None = None
    value: str | None = None
    edition: str | None = None
    production_location: str | None = None
    owned_by: str | None = None
    sold_by: str | None = None

    model_config = {"extra": "forbid"}

    @field_validator(*PROVENANCE_FIELD_NAMES, mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        """Whitespace-only strings clear the field just like null."""
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def is_empty(self) -> bool:
        """True when the patch would not change any column."""
        return not self.to_update_data()

    def to_update_data(self) -> dict[str, Any]:
        """
        Column-level update for the artworks table.

        Only keys present in the original input are included.
        """
        return self.model_dump(exclude_unset=True)


class ProvenanceEdit(ProvenanceUpdateFields):
    """
    Direct owner edit: provenance fields plus per-field visibility flags.

    Visibility flags can be toggled but not cleared; a null flag is ignored.
    """

    is_public: bool | None = None
    value_is_public: bool | None = None
    owned_by_is_public: bool | None = None
    sold_by_is_public: bool | None = None

    def to_update_data(self) -> dict[str, Any]:
        data = super().to_update_data()
        for flag in VISIBILITY_FLAG_NAMES:
            if flag in data and data[flag] is None:
                del data[flag]
        return data


class ArtworkSummary(BaseModel):
    """Artwork fields shown next to a request in review lists."""

    id: UUID | str
    title: str = "Unknown Artwork"
    image_url: str | None = None
