# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized error taxonomy for the provenance workflow.
# Services raise these internally; each public operation converts them into
# an ActionResult at its boundary (see core/models/result.py).
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class ProvenanceAPIException(Exception):
    """
    Base exception for the Provenance API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PROVENANCE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Authentication
# =============================================================================

class AuthenticationRequiredError(ProvenanceAPIException):
    """Raised when an operation is called without a signed-in user."""

    def __init__(self, message: str = "You must be signed in"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_REQUIRED",
            status_code=401,
            suggestion="Sign in and send the access token as a Bearer header",
        )


# =============================================================================
# Not Found
# =============================================================================

class ArtworkNotFoundError(ProvenanceAPIException):
    """Raised when an artwork ID doesn't exist."""

    def __init__(self, artwork_id: str):
        super().__init__(
            message="Artwork not found",
            code="ARTWORK_NOT_FOUND",
            status_code=404,
            suggestion="Check that the artwork_id is correct and the artwork hasn't been deleted",
            details={"artwork_id": artwork_id}
        )


class RequestNotFoundError(ProvenanceAPIException):
    """Raised when a request doesn't exist or is no longer pending."""

    def __init__(self, request_id: str, message: str = "Request not found or already processed"):
        super().__init__(
            message=message,
            code="REQUEST_NOT_FOUND",
            status_code=404,
            suggestion="Reload the pending requests list; the request may have been reviewed already",
            details={"request_id": request_id}
        )


class AccountNotFoundError(ProvenanceAPIException):
    """Raised when the signed-in user has no accounts row."""

    def __init__(self, account_id: str):
        super().__init__(
            message="Account not found",
            code="ACCOUNT_NOT_FOUND",
            status_code=404,
            suggestion="Finish setting up your profile before requesting ownership",
            details={"account_id": account_id}
        )


class NotificationNotFoundError(ProvenanceAPIException):
    """Raised when a notification doesn't exist for the current user."""

    def __init__(self, notification_id: str):
        super().__init__(
            message="Notification not found",
            code="NOTIFICATION_NOT_FOUND",
            status_code=404,
            details={"notification_id": notification_id}
        )


# =============================================================================
# Authorization
# =============================================================================

class NotArtworkOwnerError(ProvenanceAPIException):
    """Raised when the caller is not the artwork's current owner."""

    def __init__(
        self,
        artwork_id: str,
        message: str = "You do not have permission to edit this artwork",
    ):
        super().__init__(
            message=message,
            code="NOT_ARTWORK_OWNER",
            status_code=403,
            suggestion="Only the artwork's current owner can do this; submit an update request instead",
            details={"artwork_id": artwork_id}
        )


class SelfRequestError(ProvenanceAPIException):
    """Raised when the owner tries to file a request against their own artwork."""

    def __init__(self, artwork_id: str, request_type: str):
        if request_type == "ownership_request":
            message = "You already own this artwork"
        else:
            message = "You cannot request updates to your own artwork"
        super().__init__(
            message=message,
            code="SELF_REQUEST",
            status_code=403,
            suggestion="Edit the artwork's provenance directly instead",
            details={"artwork_id": artwork_id, "request_type": request_type}
        )


class NotAnArtistError(ProvenanceAPIException):
    """Raised when an ownership request comes from a non-artist account."""

    def __init__(self, artwork_id: str):
        super().__init__(
            message="Only artists can request ownership",
            code="NOT_AN_ARTIST",
            status_code=403,
            suggestion="Switch your account role to artist, or submit a provenance update instead",
            details={"artwork_id": artwork_id}
        )


class ArtistMismatchError(ProvenanceAPIException):
    """Raised when an ownership request comes from someone other than the artist."""

    def __init__(self, artwork_id: str):
        super().__init__(
            message="Your name must match the artist name on the artwork to request ownership",
            code="ARTIST_MISMATCH",
            status_code=403,
            suggestion="Update your profile name or ask the owner to correct the artist name",
            details={"artwork_id": artwork_id}
        )


# =============================================================================
# Conflict / Validation
# =============================================================================

class DuplicatePendingRequestError(ProvenanceAPIException):
    """Raised when the requester already has a pending request for the artwork."""

    def __init__(self, artwork_id: str, existing_request_id: str):
        super().__init__(
            message="You already have a pending request for this artwork",
            code="DUPLICATE_PENDING_REQUEST",
            status_code=409,
            suggestion="Wait for the owner to review your existing request",
            details={"artwork_id": artwork_id, "request_id": existing_request_id}
        )


class InvalidUpdateFieldsError(ProvenanceAPIException):
    """Raised when a provenance patch is empty or structurally invalid."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Invalid update fields: {error}",
            code="INVALID_UPDATE_FIELDS",
            status_code=422,
            suggestion="Send at least one known provenance field (e.g. title, medium, dimensions)",
            details={"error": error}
        )


# =============================================================================
# Downstream
# =============================================================================

class DataStoreError(ProvenanceAPIException):
    """
    Raised when a read or write against the data store fails.

    The store's own message is appended to the user-facing message.
    """

    def __init__(self, message: str, error: str):
        super().__init__(
            message=f"{message}: {error}" if error else message,
            code="DATA_STORE_ERROR",
            status_code=502,
            suggestion="Reload the artwork or request to see its current state, then try again",
            details={"action": message, "error": error}
        )


class BatchUpdateFailedError(ProvenanceAPIException):
    """
    Raised when no artwork in a batch edit could be updated.

    Carries the status of the first per-artwork failure.
    """

    def __init__(self, errors: list[str], status_code: int):
        super().__init__(
            message=f"Failed to update artworks: {', '.join(errors)}",
            code="BATCH_UPDATE_FAILED",
            status_code=status_code,
            suggestion="Check the per-artwork errors; nothing in the batch was changed",
            details={"errors": errors}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def provenance_exception_handler(
    request: Request,
    exc: ProvenanceAPIException
) -> JSONResponse:
    """
    Convert ProvenanceAPIException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
