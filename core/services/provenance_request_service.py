# =============================================================================
# core/services/provenance_request_service.py - Request/Approval Workflow
# =============================================================================
# A non-owner proposes a provenance change (or asks to become the owner),
# the artwork's current owner approves or denies, and the counterparty is
# notified at every step.
#
#     submit_request  -> row in provenance_update_requests, status = pending
#     respond_to_request(approve) -> artwork mutated, status = approved
#     respond_to_request(deny)    -> artwork untouched, status = denied
#
# "Current owner" is always read from artworks.account_id at the moment of
# the check; it is never stored on the request row.
#
# Ordering in respond_to_request:
#   1. claim: request transition (conditioned on status = pending)
#   2. approve only: artwork write (conditioned on account_id = reviewer)
#   3. notification (best effort)
# Losing 1 changes nothing. A failure in 2 releases the claim back to
# pending, so respond can be retried and a denied request never mutates
# the artwork.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.artwork import ProvenanceUpdateFields
from core.models.notification import NotificationType
from core.models.provenance_request import (
    ProvenanceRequestCreate,
    ProvenanceRequestList,
    ProvenanceRequestResponse,
    RequestStatus,
    RequestType,
    ReviewAction,
)
from core.models.result import ActionResult
from core.services.notification_service import NotificationService
from core.services.provenance_service import OwnerAuthorization, ProvenanceService
from app.auth.models import AuthUser, UserRole, get_user_role
from app.config import settings
from app.exceptions import (
    AccountNotFoundError,
    ArtistMismatchError,
    ArtworkNotFoundError,
    AuthenticationRequiredError,
    DataStoreError,
    DuplicatePendingRequestError,
    InvalidUpdateFieldsError,
    NotAnArtistError,
    NotArtworkOwnerError,
    ProvenanceAPIException,
    RequestNotFoundError,
    SelfRequestError,
)

logger = logging.getLogger(__name__)


# Notification wording per (request type, event)
_SUBMITTED = {
    RequestType.PROVENANCE_UPDATE: (
        NotificationType.PROVENANCE_UPDATE_REQUEST,
        "Provenance Update Request: {title}",
        'A user has requested to update the provenance information for "{title}". '
        "Review the request in your portal.",
    ),
    RequestType.OWNERSHIP_REQUEST: (
        NotificationType.OWNERSHIP_REQUEST,
        "Ownership Request: {title}",
        'An artist has requested ownership of "{title}". Review the request in your portal.',
    ),
}

_REVIEWED = {
    (RequestType.PROVENANCE_UPDATE, ReviewAction.APPROVE): (
        NotificationType.PROVENANCE_UPDATE_APPROVED,
        "Update Approved: {title}",
        'Your provenance update request for "{title}" has been approved. '
        "Your update was applied.",
    ),
    (RequestType.OWNERSHIP_REQUEST, ReviewAction.APPROVE): (
        NotificationType.OWNERSHIP_APPROVED,
        "Ownership Approved: {title}",
        'Your ownership request for "{title}" has been approved. '
        "You are now the owner of this artwork.",
    ),
    (RequestType.PROVENANCE_UPDATE, ReviewAction.DENY): (
        NotificationType.PROVENANCE_UPDATE_DENIED,
        "Update Denied: {title}",
        'Your provenance update request for "{title}" has been denied.',
    ),
    (RequestType.OWNERSHIP_REQUEST, ReviewAction.DENY): (
        NotificationType.OWNERSHIP_DENIED,
        "Ownership Denied: {title}",
        'Your ownership request for "{title}" has been denied.',
    ),
}


def _store_error(action: str, e: SupabaseClientError) -> DataStoreError:
    logger.error(f"{action}: {e}")
    return DataStoreError(action, e.message)


class ProvenanceRequestService:
    """
    Service for the provenance update / ownership request workflow.
    """

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    @staticmethod
    def submit_request(
        artwork_id: UUID | str,
        user: AuthUser | None,
        request: ProvenanceRequestCreate,
    ) -> ActionResult:
        """
        File a pending request against an artwork.

        Preconditions, checked in order:
        - a user is signed in
        - the artwork exists
        - (ownership requests, when enabled) the user's account name matches
          the artwork's artist_name
        - the user is not the artwork's current owner
        - the user has no pending request for this artwork
        - a provenance_update carries a non-empty patch

        On success the owner is notified; a failed notification does not
        fail the submission.

        Returns:
            ActionResult with data["request_id"] on success
        """
        artwork_id_str = str(artwork_id)

        try:
            if user is None:
                raise AuthenticationRequiredError("You must be signed in to request an update")

            try:
                artwork = SupabaseClient.fetch_artwork(artwork_id_str)
            except SupabaseClientError as e:
                raise _store_error("Failed to load artwork", e)

            if not artwork:
                raise ArtworkNotFoundError(artwork_id_str)

            request_type = request.request_type

            if (
                request_type is RequestType.OWNERSHIP_REQUEST
                and settings.OWNERSHIP_REQUIRES_ARTIST_MATCH
            ):
                ProvenanceRequestService._check_artist_match(artwork, user)

            if str(artwork.get("account_id")) == str(user.id):
                raise SelfRequestError(artwork_id_str, request_type.value)

            try:
                existing = SupabaseClient.find_pending_request(artwork_id_str, user.id)
            except SupabaseClientError as e:
                raise _store_error("Failed to check for pending requests", e)

            if existing:
                raise DuplicatePendingRequestError(artwork_id_str, str(existing["id"]))

            if request_type is RequestType.PROVENANCE_UPDATE:
                if request.update_fields is None or request.update_fields.is_empty():
                    raise InvalidUpdateFieldsError("a provenance update needs at least one field")
                update_fields = request.update_fields.to_update_data()
            else:
                update_fields = {}

            try:
                row = SupabaseClient.insert_request({
                    "artwork_id": artwork_id_str,
                    "requested_by": str(user.id),
                    "update_fields": update_fields,
                    "request_message": request.request_message or None,
                    "status": RequestStatus.PENDING.value,
                    "request_type": request_type.value,
                })
            except SupabaseClientError as e:
                raise _store_error("Failed to create update request", e)

        except ProvenanceAPIException as e:
            logger.warning(f"Request submission rejected for artwork {artwork_id_str}: {e.code}")
            return ActionResult.failure(e)

        logger.info(
            f"Created {request_type.value} request {row['id']} for artwork {artwork_id_str} "
            f"by user {user.id}"
        )

        notification_type, title, message = _SUBMITTED[request_type]
        artwork_title = artwork.get("title") or "Untitled"
        NotificationService.notify_safely(
            user_id=artwork["account_id"],
            type=notification_type,
            title=title.format(title=artwork_title),
            message=message.format(title=artwork_title),
            artwork_id=artwork_id_str,
            related_user_id=user.id,
            metadata={
                "request_id": str(row["id"]),
                "request_type": request_type.value,
                "review_url": settings.PORTAL_PATH,
            },
        )

        return ActionResult.ok({"request_id": str(row["id"]), "status": RequestStatus.PENDING.value})

    @staticmethod
    def _check_artist_match(artwork: dict[str, Any], user: AuthUser) -> None:
        """
        Ownership may only be claimed by an artist account whose name
        matches the artist named on the artwork.

        Raises:
            AccountNotFoundError: If the user has no account row
            NotAnArtistError: If the account's role isn't artist
            ArtistMismatchError: If the names differ
        """
        try:
            account = SupabaseClient.fetch_account(user.id)
        except SupabaseClientError as e:
            raise _store_error("Failed to load account", e)

        if not account:
            raise AccountNotFoundError(str(user.id))

        if get_user_role(account.get("public_data")) is not UserRole.ARTIST:
            raise NotAnArtistError(str(artwork["id"]))

        artist_name = (artwork.get("artist_name") or "").strip().lower()
        account_name = (account.get("name") or "").strip().lower()

        if not artist_name or account_name != artist_name:
            raise ArtistMismatchError(str(artwork["id"]))

    # -------------------------------------------------------------------------
    # Review listings
    # -------------------------------------------------------------------------

    @staticmethod
    def list_pending_requests_for_owner(user: AuthUser | None) -> ProvenanceRequestList:
        """
        Pending requests addressed to artworks the user owns right now.

        Ownership is derived from the artworks table at call time, so a
        request filed while someone else owned the artwork shows up for
        whoever owns it now. Newest first, joined with artwork title/image
        and requester name.

        Raises:
            DataStoreError: If a query fails
        """
        if user is None:
            return ProvenanceRequestList()

        try:
            owned_ids = SupabaseClient.fetch_owned_artwork_ids(user.id)
            if not owned_ids:
                return ProvenanceRequestList()

            rows = SupabaseClient.fetch_pending_requests_for_artworks(owned_ids)
            artworks = {
                str(a["id"]): a
                for a in SupabaseClient.fetch_artworks(list({r["artwork_id"] for r in rows}))
            }
            requesters = SupabaseClient.fetch_accounts(list({r["requested_by"] for r in rows}))
        except SupabaseClientError as e:
            raise _store_error("Failed to load pending requests", e)

        requests = [
            ProvenanceRequestResponse.from_db_row(
                row,
                artwork=artworks.get(str(row["artwork_id"]), {}),
                requester=requesters.get(row["requested_by"], {}),
            )
            for row in rows
        ]
        return ProvenanceRequestList(requests=requests, total=len(requests))

    @staticmethod
    def list_requests_for_requester(
        user: AuthUser | None,
        status: RequestStatus | None = None,
    ) -> ProvenanceRequestList:
        """
        Requests the user has filed, newest first, with their outcomes.

        Raises:
            DataStoreError: If a query fails
        """
        if user is None:
            return ProvenanceRequestList()

        try:
            rows = SupabaseClient.fetch_requests_by_requester(
                user.id,
                status=status.value if status else None,
            )
            artworks = {
                str(a["id"]): a
                for a in SupabaseClient.fetch_artworks(list({r["artwork_id"] for r in rows}))
            }
        except SupabaseClientError as e:
            raise _store_error("Failed to load requests", e)

        requests = [
            ProvenanceRequestResponse.from_db_row(row, artwork=artworks.get(str(row["artwork_id"]), {}))
            for row in rows
        ]
        return ProvenanceRequestList(requests=requests, total=len(requests))

    @staticmethod
    def get_request(request_id: UUID | str, user: AuthUser | None) -> ProvenanceRequestResponse:
        """
        One request, visible to its requester or the artwork's current owner.

        Anyone else gets RequestNotFoundError so existence isn't revealed.

        Raises:
            AuthenticationRequiredError: If no user is signed in
            RequestNotFoundError: If missing or not visible to the user
            DataStoreError: If a query fails
        """
        if user is None:
            raise AuthenticationRequiredError()

        request_id_str = str(request_id)
        try:
            row = SupabaseClient.fetch_request(request_id_str)
            artwork = SupabaseClient.fetch_artwork(row["artwork_id"]) if row else None
        except SupabaseClientError as e:
            raise _store_error("Failed to load request", e)

        if not row:
            raise RequestNotFoundError(request_id_str, message="Request not found")

        is_requester = str(row["requested_by"]) == str(user.id)
        is_owner = artwork is not None and str(artwork.get("account_id")) == str(user.id)
        if not (is_requester or is_owner):
            raise RequestNotFoundError(request_id_str, message="Request not found")

        return ProvenanceRequestResponse.from_db_row(row, artwork=artwork or {})

    # -------------------------------------------------------------------------
    # Review
    # -------------------------------------------------------------------------

    @staticmethod
    def respond_to_request(
        request_id: UUID | str,
        user: AuthUser | None,
        action: ReviewAction,
        review_message: str | None = None,
    ) -> ActionResult:
        """
        Approve or deny a pending request.

        Transition guard: the request must be pending and the reviewer must
        be the artwork's current owner (re-read now, not at submission).

        Approve:
            ownership_request -> artworks.account_id = requested_by
            provenance_update -> stored patch applied via ProvenanceService
        Deny:
            no artwork change

        The request row is claimed first with a conditional update on
        status = pending, so of two concurrent reviewers exactly one wins
        and the other is told the request was already processed. Only the
        winner of an approve touches the artwork; if that artwork write
        fails the claim is released back to pending so approve can be
        retried.

        Returns:
            ActionResult with data["status"] on success
        """
        request_id_str = str(request_id)

        try:
            if user is None:
                raise AuthenticationRequiredError()

            try:
                request = SupabaseClient.fetch_request(request_id_str)
            except SupabaseClientError as e:
                raise _store_error("Failed to load request", e)

            if not request or request.get("status") != RequestStatus.PENDING.value:
                raise RequestNotFoundError(request_id_str)

            try:
                artwork = SupabaseClient.fetch_artwork(request["artwork_id"])
            except SupabaseClientError as e:
                raise _store_error("Failed to load artwork", e)

            if not artwork:
                raise RequestNotFoundError(request_id_str)

            authorization = OwnerAuthorization.verify(
                artwork,
                user.id,
                message="You do not have permission to review this request",
            )

            request_type = RequestType(request.get("request_type") or RequestType.PROVENANCE_UPDATE.value)

            fields = None
            if action is ReviewAction.APPROVE and request_type is RequestType.PROVENANCE_UPDATE:
                try:
                    fields = ProvenanceUpdateFields.model_validate(request.get("update_fields") or {})
                except ValidationError as e:
                    raise InvalidUpdateFieldsError(str(e))

            try:
                claimed = SupabaseClient.transition_request(
                    request_id_str,
                    {
                        "status": action.resulting_status.value,
                        "reviewed_by": str(user.id),
                        "reviewed_at": datetime.now(timezone.utc).isoformat(),
                        "review_message": review_message or None,
                    },
                )
            except SupabaseClientError as e:
                raise _store_error("Failed to update request status", e)

            if claimed is None:
                logger.warning(f"Request {request_id_str} was reviewed concurrently; skipping")
                raise RequestNotFoundError(request_id_str)

            if action is ReviewAction.APPROVE:
                try:
                    ProvenanceRequestService._apply_request(
                        request, request_type, authorization, fields
                    )
                except Exception:
                    ProvenanceRequestService._release_claim(request_id_str, user.id)
                    raise

        except ProvenanceAPIException as e:
            logger.warning(f"Response to request {request_id_str} rejected: {e.code}")
            return ActionResult.failure(e)

        logger.info(
            f"Request {request_id_str} ({request_type.value}) "
            f"{action.resulting_status.value} by user {user.id}"
        )

        notification_type, title, message = _REVIEWED[(request_type, action)]
        artwork_title = artwork.get("title") or "Untitled"
        NotificationService.notify_safely(
            user_id=request["requested_by"],
            type=notification_type,
            title=title.format(title=artwork_title),
            message=message.format(title=artwork_title),
            artwork_id=str(artwork["id"]),
            related_user_id=user.id,
            metadata={"request_id": request_id_str, "review_message": review_message or None},
        )

        return ActionResult.ok({
            "request_id": request_id_str,
            "status": action.resulting_status.value,
        })

    @staticmethod
    def _apply_request(
        request: dict[str, Any],
        request_type: RequestType,
        authorization: OwnerAuthorization,
        fields: ProvenanceUpdateFields | None = None,
    ) -> None:
        """
        Mutate the artwork for an approved request.

        fields is the already validated stored patch (provenance updates).

        Raises:
            NotArtworkOwnerError: If ownership changed mid-review
            DataStoreError: If the artwork write fails
        """
        if request_type is RequestType.OWNERSHIP_REQUEST:
            try:
                updated = SupabaseClient.update_artwork(
                    authorization.artwork_id,
                    {
                        "account_id": str(request["requested_by"]),
                        "updated_by": authorization.owner_id,
                    },
                    expected_owner_id=authorization.owner_id,
                )
            except SupabaseClientError as e:
                raise _store_error("Failed to transfer ownership", e)

            if updated is None:
                raise NotArtworkOwnerError(
                    authorization.artwork_id,
                    message="You do not have permission to review this request",
                )
            logger.info(
                f"Transferred artwork {authorization.artwork_id} from {authorization.owner_id} "
                f"to {request['requested_by']}"
            )
            return

        ProvenanceService.apply_update(authorization, fields, notify=False)

    @staticmethod
    def _release_claim(request_id: str, reviewer_id: UUID | str) -> None:
        """
        Put an approved-but-not-applied request back to pending.

        Only matches the row this reviewer claimed. A failure here is logged;
        the caller re-raises the error that made the release necessary.
        """
        try:
            released = SupabaseClient.release_request(request_id, reviewer_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to release request {request_id} back to pending: {e}")
            return

        if released is None:
            logger.error(f"Request {request_id} was no longer claimed by {reviewer_id}; not released")
        else:
            logger.info(f"Released request {request_id} back to pending")
