# =============================================================================
# core/services/provenance_service.py - Artwork Provenance Updates
# =============================================================================
# The single mutation primitive for an artwork's provenance columns.
#
# Two kinds of caller reach it:
# - the direct owner edit (actor is the signed-in AuthUser; ownership is
#   verified here against the artwork's current account_id)
# - the request approval path and batch edits (actor is an
#   OwnerAuthorization that the caller obtained by verifying ownership itself)
#
# There is no flag that turns the ownership check off. Skipping it requires
# holding an OwnerAuthorization for that exact artwork, and those can only be
# produced by OwnerAuthorization.verify().
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.artwork import ProvenanceEdit, ProvenanceUpdateFields
from core.models.notification import NotificationType
from core.models.result import ActionResult
from core.services.notification_service import NotificationService
from app.auth.models import AuthUser
from app.config import settings
from app.exceptions import (
    ArtworkNotFoundError,
    AuthenticationRequiredError,
    BatchUpdateFailedError,
    DataStoreError,
    InvalidUpdateFieldsError,
    NotArtworkOwnerError,
    ProvenanceAPIException,
)

logger = logging.getLogger(__name__)

_VERIFIED = object()


class OwnerAuthorization:
    """
    Proof that a user was the current owner of one artwork when checked.

    Example:
        artwork = SupabaseClient.fetch_artwork(artwork_id)
        auth = OwnerAuthorization.verify(artwork, user.id)
        ProvenanceService.apply_update(auth, fields, notify=False)
    """

    __slots__ = ("artwork_id", "owner_id", "artwork_title")

    def __init__(self, artwork_id: str, owner_id: str, artwork_title: str | None, _token: object = None):
        if _token is not _VERIFIED:
            raise TypeError("OwnerAuthorization can only be created by OwnerAuthorization.verify()")
        self.artwork_id = artwork_id
        self.owner_id = owner_id
        self.artwork_title = artwork_title

    @classmethod
    def verify(
        cls,
        artwork: dict[str, Any],
        user_id: UUID | str,
        message: str = "You do not have permission to edit this artwork",
    ) -> "OwnerAuthorization":
        """
        Check user_id against the artwork row's account_id.

        Raises:
            NotArtworkOwnerError: If the user is not the current owner
        """
        if str(artwork.get("account_id")) != str(user_id):
            raise NotArtworkOwnerError(str(artwork.get("id")), message=message)
        return cls(str(artwork["id"]), str(user_id), artwork.get("title"), _token=_VERIFIED)

    def covers(self, artwork_id: UUID | str) -> bool:
        return self.artwork_id == str(artwork_id)

    def __repr__(self) -> str:
        return f"OwnerAuthorization(artwork_id={self.artwork_id!r}, owner_id={self.owner_id!r})"


class ProvenanceService:
    """
    Service for owner edits of artwork provenance.
    """

    @staticmethod
    def authorize_owner(artwork_id: UUID | str, user: AuthUser | None) -> OwnerAuthorization:
        """
        Load the artwork and verify the user currently owns it.

        Raises:
            AuthenticationRequiredError: If no user is signed in
            ArtworkNotFoundError: If the artwork doesn't exist
            NotArtworkOwnerError: If the user isn't the current owner
            DataStoreError: If the lookup fails
        """
        if user is None:
            raise AuthenticationRequiredError("You must be signed in to update provenance")

        try:
            artwork = SupabaseClient.fetch_artwork(artwork_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to load artwork {artwork_id}: {e}")
            raise DataStoreError("Failed to load artwork", e.message)

        if not artwork:
            raise ArtworkNotFoundError(str(artwork_id))

        return OwnerAuthorization.verify(artwork, user.id)

    @staticmethod
    def apply_update(
        authorization: OwnerAuthorization,
        fields: ProvenanceUpdateFields,
        notify: bool = True,
    ) -> dict[str, Any]:
        """
        Write a provenance patch to the artwork the authorization covers.

        Only keys present in the patch are written. The write is conditioned
        on the authorized owner still holding the artwork.

        Returns:
            The updated artwork row

        Raises:
            TypeError: If authorization is not an OwnerAuthorization
            InvalidUpdateFieldsError: If the patch is empty
            NotArtworkOwnerError: If ownership changed since authorization
            DataStoreError: If the update fails
        """
        if not isinstance(authorization, OwnerAuthorization):
            raise TypeError("apply_update requires an OwnerAuthorization")

        update_data = fields.to_update_data()
        if not update_data:
            raise InvalidUpdateFieldsError("no fields to update")

        update_data["updated_by"] = authorization.owner_id

        try:
            updated = SupabaseClient.update_artwork(
                authorization.artwork_id,
                update_data,
                expected_owner_id=authorization.owner_id,
            )
        except SupabaseClientError as e:
            logger.error(f"Error updating provenance for artwork {authorization.artwork_id}: {e}")
            raise DataStoreError("Failed to update provenance", e.message)

        if updated is None:
            logger.warning(
                f"Provenance update for artwork {authorization.artwork_id} matched no row; "
                f"ownership changed since authorization"
            )
            raise NotArtworkOwnerError(authorization.artwork_id)

        logger.info(
            f"Updated provenance for artwork {authorization.artwork_id}: "
            f"{sorted(k for k in update_data if k != 'updated_by')}"
        )

        if notify:
            title = updated.get("title") or authorization.artwork_title or "your artwork"
            NotificationService.notify_safely(
                user_id=authorization.owner_id,
                type=NotificationType.ARTWORK_UPDATED,
                title=f"Artwork Updated: {title}",
                message=f'The provenance information for "{title}" has been updated.',
                artwork_id=authorization.artwork_id,
                metadata={"fields": sorted(k for k in update_data if k != "updated_by")},
            )

        return updated

    @staticmethod
    def update_provenance(
        artwork_id: UUID | str,
        edit: ProvenanceUpdateFields,
        actor: AuthUser | OwnerAuthorization | None,
        notify: bool = True,
    ) -> ActionResult:
        """
        Apply a partial provenance edit to one artwork.

        Args:
            artwork_id: The artwork UUID
            edit: Fields to write (ProvenanceEdit for owner edits)
            actor: The signed-in user (ownership checked here) or an
                OwnerAuthorization for this artwork (already checked)
            notify: Emit an artwork_updated notification to the owner

        Returns:
            ActionResult with the updated artwork under data["artwork"]
        """
        try:
            if isinstance(actor, OwnerAuthorization):
                if not actor.covers(artwork_id):
                    raise NotArtworkOwnerError(str(artwork_id))
                authorization = actor
            else:
                authorization = ProvenanceService.authorize_owner(artwork_id, actor)

            updated = ProvenanceService.apply_update(authorization, edit, notify=notify)
            return ActionResult.ok({"artwork": updated})

        except ProvenanceAPIException as e:
            logger.warning(f"Provenance update rejected for artwork {artwork_id}: {e.code}")
            return ActionResult.failure(e)

    @staticmethod
    def batch_update_provenance(
        artwork_ids: list[UUID | str],
        edit: ProvenanceEdit,
        user: AuthUser | None,
    ) -> ActionResult:
        """
        Apply the same edit to many artworks owned by the caller.

        Ownership of every artwork is verified before anything is written;
        one artwork the caller doesn't own aborts the whole batch. Writes
        then run sequentially, one round-trip per artwork, and failures are
        collected rather than stopping the loop. No notifications are sent.

        Returns:
            ActionResult with updated_count; success is False only when
            nothing was updated
        """
        try:
            if user is None:
                raise AuthenticationRequiredError("You must be signed in to update provenance")

            ids = list(dict.fromkeys(str(a) for a in artwork_ids))
            if not ids:
                raise InvalidUpdateFieldsError("no artworks selected")
            if len(ids) > settings.BATCH_UPDATE_MAX_ARTWORKS:
                raise InvalidUpdateFieldsError(
                    f"at most {settings.BATCH_UPDATE_MAX_ARTWORKS} artworks per batch"
                )
            if edit.is_empty():
                raise InvalidUpdateFieldsError("no fields to update")

            try:
                artworks = SupabaseClient.fetch_artworks(ids)
            except SupabaseClientError as e:
                logger.error(f"Error fetching artworks for batch update: {e}")
                raise DataStoreError("Error fetching artworks", e.message)

            by_id = {str(a["id"]): a for a in artworks}
            if any(str(a.get("account_id")) != str(user.id) for a in artworks):
                raise NotArtworkOwnerError(
                    ",".join(ids),
                    message="You do not have permission to edit some of these artworks",
                )
        except ProvenanceAPIException as e:
            return ActionResult.failure(e)

        updated_count = 0
        failures: list[ProvenanceAPIException] = []
        errors: list[str] = []

        for artwork_id in ids:
            try:
                artwork = by_id.get(artwork_id)
                if artwork is None:
                    raise ArtworkNotFoundError(artwork_id)
                authorization = OwnerAuthorization.verify(artwork, user.id)
                ProvenanceService.apply_update(authorization, edit, notify=False)
                updated_count += 1
            except ProvenanceAPIException as e:
                failures.append(e)
                errors.append(f"Artwork {artwork_id}: {e.message}")

        logger.info(f"Batch provenance update: {updated_count}/{len(ids)} artworks updated")

        if errors and updated_count == 0:
            result = ActionResult.failure(
                BatchUpdateFailedError(errors, status_code=failures[0].status_code)
            )
            result.updated_count = 0
            return result

        if errors:
            return ActionResult.ok(
                updated_count=updated_count,
                error=f"Updated {updated_count} artworks, but some failed: {', '.join(errors)}",
            )

        return ActionResult.ok(updated_count=updated_count)
