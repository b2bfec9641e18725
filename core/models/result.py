# =============================================================================
# core/models/result.py - Uniform Operation Result
# =============================================================================
# Every mutating workflow operation returns an ActionResult instead of
# raising. Failures carry the user-facing error string, a machine-readable
# code and (internally) the HTTP status the router should use.
#
# Flow:
#   service raises ProvenanceAPIException internally
#   -> public operation catches it at its boundary
#   -> ActionResult.failure(exc) is returned to the caller
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field, PrivateAttr

from app.exceptions import ProvenanceAPIException


class ActionResult(BaseModel):
    """
    Result of a workflow operation.

    Example (success):
        {"success": true, "data": {"request_id": "..."}}

    Example (failure):
        {"success": false, "error": "Artwork not found", "code": "ARTWORK_NOT_FOUND"}
    """

    success: bool
    error: str | None = None
    code: str | None = None
    data: dict[str, Any] | None = None
    updated_count: int | None = Field(
        default=None,
        description="Number of artworks changed (batch operations only)"
    )

    _status_code: int = PrivateAttr(default=200)

    @property
    def status_code(self) -> int:
        return self._status_code

    @classmethod
    def ok(cls, data: dict[str, Any] | None = None, **kwargs: Any) -> "ActionResult":
        return cls(success=True, data=data, **kwargs)

    @classmethod
    def failure(cls, exc: ProvenanceAPIException) -> "ActionResult":
        result = cls(success=False, error=exc.message, code=exc.code)
        result._status_code = exc.status_code
        return result
