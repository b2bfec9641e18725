# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for:
# - Artworks (ownership lookups, partial provenance updates)
# - Accounts (requester display names, artist matching)
# - Provenance update requests (insert, pending lookups, status transitions)
# - Notifications (insert, list, unread count, mark read)
#
# Every write that must not race is expressed as a single conditional
# UPDATE (filters on the expected current state), never as read-then-write.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   artwork = SupabaseClient.fetch_artwork(artwork_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

ARTWORKS_TABLE = "artworks"
ACCOUNTS_TABLE = "accounts"
REQUESTS_TABLE = "provenance_update_requests"
NOTIFICATIONS_TABLE = "notifications"

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        artwork = SupabaseClient.fetch_artwork("550e8400-...")
        owner_id = artwork["account_id"] if artwork else None
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Authorization is therefore enforced by the service layer.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Artworks
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_artwork(
        cls,
        artwork_id: str | UUID,
        columns: str = "id, account_id, title, artist_name, image_url",
    ) -> dict[str, Any] | None:
        """
        Fetch a single artwork by ID.

        The returned account_id is always read fresh; callers must never
        cache it across operations.

        Returns:
            Artwork dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        artwork_id_str = cls._normalize_uuid(artwork_id)

        try:
            response = (
                client.table(ARTWORKS_TABLE)
                .select(columns)
                .eq("id", artwork_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch artwork: {e}",
                code="FETCH_ARTWORK_FAILED",
                suggestion="Check that the artwork_id exists",
                details={"artwork_id": artwork_id_str}
            )

    @classmethod
    def fetch_artworks(
        cls,
        artwork_ids: list[str],
        columns: str = "id, account_id, title, image_url",
    ) -> list[dict[str, Any]]:
        """
        Fetch several artworks by ID in one round-trip.

        Raises:
            SupabaseClientError: If query fails
        """
        if not artwork_ids:
            return []

        client = cls.get_client()

        try:
            response = (
                client.table(ARTWORKS_TABLE)
                .select(columns)
                .in_("id", [cls._normalize_uuid(a) for a in artwork_ids])
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch artworks: {e}",
                code="FETCH_ARTWORKS_FAILED",
                details={"artwork_count": len(artwork_ids)}
            )

    @classmethod
    def fetch_owned_artwork_ids(cls, account_id: str | UUID) -> list[str]:
        """
        IDs of all artworks whose current account_id is the given account.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        account_id_str = cls._normalize_uuid(account_id)

        try:
            response = (
                client.table(ARTWORKS_TABLE)
                .select("id")
                .eq("account_id", account_id_str)
                .execute()
            )
            return [row["id"] for row in (response.data or [])]

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch owned artworks: {e}",
                code="FETCH_OWNED_ARTWORKS_FAILED",
                details={"account_id": account_id_str}
            )

    @classmethod
    def update_artwork(
        cls,
        artwork_id: str | UUID,
        update_data: dict[str, Any],
        expected_owner_id: str | UUID | None = None,
    ) -> dict[str, Any] | None:
        """
        Apply a partial column update to one artwork.

        When expected_owner_id is given the write is conditioned on
        account_id still being that owner, so a concurrent ownership
        transfer makes the update match nothing.

        Returns:
            The updated row, or None if no row matched the filters

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        artwork_id_str = cls._normalize_uuid(artwork_id)

        try:
            query = (
                client.table(ARTWORKS_TABLE)
                .update(update_data)
                .eq("id", artwork_id_str)
            )
            if expected_owner_id is not None:
                query = query.eq("account_id", cls._normalize_uuid(expected_owner_id))

            response = query.execute()

            if response.data:
                return response.data[0]
            return None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update artwork: {e}",
                code="UPDATE_ARTWORK_FAILED",
                details={"artwork_id": artwork_id_str, "columns": sorted(update_data)}
            )

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_account(cls, account_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch an account's id, name and public_data.

        Returns:
            Account dict, or None if not found
        """
        client = cls.get_client()
        account_id_str = cls._normalize_uuid(account_id)

        try:
            response = (
                client.table(ACCOUNTS_TABLE)
                .select("id, name, public_data")
                .eq("id", account_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch account: {e}",
                code="FETCH_ACCOUNT_FAILED",
                details={"account_id": account_id_str}
            )

    @classmethod
    def fetch_accounts(cls, account_ids: list[str]) -> dict[str, dict[str, Any]]:
        """
        Fetch display names for several accounts.

        Returns:
            Mapping of account id -> {"id", "name"}
        """
        if not account_ids:
            return {}

        client = cls.get_client()

        try:
            response = (
                client.table(ACCOUNTS_TABLE)
                .select("id, name")
                .in_("id", [cls._normalize_uuid(a) for a in account_ids])
                .execute()
            )
            return {row["id"]: row for row in (response.data or [])}

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch accounts: {e}",
                code="FETCH_ACCOUNTS_FAILED",
                details={"account_count": len(account_ids)}
            )

    # -------------------------------------------------------------------------
    # Provenance Update Requests
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_request(cls, request_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a provenance update request by ID.

        Returns:
            Request dict, or None if not found
        """
        client = cls.get_client()
        request_id_str = cls._normalize_uuid(request_id)

        try:
            response = (
                client.table(REQUESTS_TABLE)
                .select("*")
                .eq("id", request_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch request: {e}",
                code="FETCH_REQUEST_FAILED",
                details={"request_id": request_id_str}
            )

    @classmethod
    def find_pending_request(
        cls,
        artwork_id: str | UUID,
        requested_by: str | UUID,
    ) -> dict[str, Any] | None:
        """
        Find the pending request a user has open against an artwork, if any.

        Uses limit(1) rather than single() so that legacy duplicates
        don't surface as a query error.
        """
        client = cls.get_client()
        artwork_id_str = cls._normalize_uuid(artwork_id)

        try:
            response = (
                client.table(REQUESTS_TABLE)
                .select("id, request_type")
                .eq("artwork_id", artwork_id_str)
                .eq("requested_by", cls._normalize_uuid(requested_by))
                .eq("status", "pending")
                .limit(1)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to check for pending requests: {e}",
                code="FIND_PENDING_REQUEST_FAILED",
                details={"artwork_id": artwork_id_str}
            )

    @classmethod
    def fetch_pending_requests_for_artworks(
        cls,
        artwork_ids: list[str],
    ) -> list[dict[str, Any]]:
        """
        Pending requests addressed to any of the given artworks, newest first.
        """
        if not artwork_ids:
            return []

        client = cls.get_client()

        try:
            response = (
                client.table(REQUESTS_TABLE)
                .select("*")
                .in_("artwork_id", artwork_ids)
                .eq("status", "pending")
                .order("requested_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch pending requests: {e}",
                code="FETCH_PENDING_REQUESTS_FAILED",
                details={"artwork_count": len(artwork_ids)}
            )

    @classmethod
    def fetch_requests_by_requester(
        cls,
        requested_by: str | UUID,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        All requests filed by one user, newest first.
        """
        client = cls.get_client()
        requested_by_str = cls._normalize_uuid(requested_by)

        try:
            query = (
                client.table(REQUESTS_TABLE)
                .select("*")
                .eq("requested_by", requested_by_str)
            )
            if status:
                query = query.eq("status", status)

            response = query.order("requested_at", desc=True).execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch requests: {e}",
                code="FETCH_REQUESTS_FAILED",
                details={"requested_by": requested_by_str}
            )

    @classmethod
    def insert_request(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new provenance update request.

        Returns:
            Inserted request dict with generated id and requested_at

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(REQUESTS_TABLE)
                .insert(data)
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert request: {e}",
                code="INSERT_REQUEST_FAILED",
                details={"artwork_id": data.get("artwork_id")}
            )

    @classmethod
    def transition_request(
        cls,
        request_id: str | UUID,
        update_data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Move a request out of pending in one conditional UPDATE.

        The filter on status = 'pending' makes the transition at-most-once:
        of two concurrent reviewers only one update matches a row.

        Returns:
            The updated row, or None if the request was no longer pending

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        request_id_str = cls._normalize_uuid(request_id)

        try:
            response = (
                client.table(REQUESTS_TABLE)
                .update(update_data)
                .eq("id", request_id_str)
                .eq("status", "pending")
                .execute()
            )

            if response.data:
                return response.data[0]
            return None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update request status: {e}",
                code="TRANSITION_REQUEST_FAILED",
                details={"request_id": request_id_str, "status": update_data.get("status")}
            )

    @classmethod
    def release_request(
        cls,
        request_id: str | UUID,
        reviewed_by: str | UUID,
    ) -> dict[str, Any] | None:
        """
        Undo an approval claim whose artwork write failed.

        Conditioned on the row still being approved by this reviewer.

        Returns:
            The pending row, or None if no row matched

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        request_id_str = cls._normalize_uuid(request_id)

        try:
            response = (
                client.table(REQUESTS_TABLE)
                .update({
                    "status": "pending",
                    "reviewed_by": None,
                    "reviewed_at": None,
                    "review_message": None,
                })
                .eq("id", request_id_str)
                .eq("status", "approved")
                .eq("reviewed_by", cls._normalize_uuid(reviewed_by))
                .execute()
            )

            if response.data:
                return response.data[0]
            return None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to release request: {e}",
                code="RELEASE_REQUEST_FAILED",
                details={"request_id": request_id_str}
            )

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    @classmethod
    def insert_notification(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a notification row.

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(NOTIFICATIONS_TABLE)
                .insert(data)
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create notification: {e}",
                code="INSERT_NOTIFICATION_FAILED",
                details={"user_id": data.get("user_id"), "type": data.get("type")}
            )

    @classmethod
    def fetch_notifications(
        cls,
        user_id: str | UUID,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """
        A user's notifications, newest first.
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            query = (
                client.table(NOTIFICATIONS_TABLE)
                .select("*")
                .eq("user_id", user_id_str)
            )
            if unread_only:
                query = query.eq("read", False)

            response = query.order("created_at", desc=True).limit(limit).execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch notifications: {e}",
                code="FETCH_NOTIFICATIONS_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def count_unread_notifications(cls, user_id: str | UUID) -> int:
        """Count a user's unread notifications without fetching rows."""
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table(NOTIFICATIONS_TABLE)
                .select("id", count="exact", head=True)
                .eq("user_id", user_id_str)
                .eq("read", False)
                .execute()
            )
            return response.count or 0

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count notifications: {e}",
                code="COUNT_NOTIFICATIONS_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def mark_notifications_read(
        cls,
        user_id: str | UUID,
        notification_id: str | UUID | None = None,
    ) -> list[dict[str, Any]]:
        """
        Mark one (or, without notification_id, every unread) notification
        of a user as read. Always scoped to user_id.

        Returns:
            The rows that were updated
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            query = (
                client.table(NOTIFICATIONS_TABLE)
                .update({"read": True})
                .eq("user_id", user_id_str)
            )
            if notification_id is not None:
                query = query.eq("id", cls._normalize_uuid(notification_id))
            else:
                query = query.eq("read", False)

            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to mark notifications as read: {e}",
                code="MARK_NOTIFICATIONS_READ_FAILED",
                details={"user_id": user_id_str}
            )
