# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - An in-memory stand-in for SupabaseClient so workflow tests can run
#   whole submit -> review -> respond scenarios against real state
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import patch
from uuid import uuid4

import pytest

from app.auth.models import AuthUser
from lib.supabase_client import SupabaseClientError


# Modules that import SupabaseClient by name
PATCH_TARGETS = (
    "core.services.provenance_request_service.SupabaseClient",
    "core.services.provenance_service.SupabaseClient",
    "core.services.notification_service.SupabaseClient",
)


class InMemorySupabase:
    """
    Dict-backed replacement for the SupabaseClient wrapper.

    Mirrors the wrapper's method signatures and its conditional-update
    semantics (a filter that matches nothing returns None). Add a method
    name to `fail` to make it raise SupabaseClientError.
    """

    def __init__(self):
        self.artworks: dict[str, dict[str, Any]] = {}
        self.accounts: dict[str, dict[str, Any]] = {}
        self.requests: dict[str, dict[str, Any]] = {}
        self.notifications: list[dict[str, Any]] = []
        self.fail: set[str] = set()
        self._clock = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    # -- helpers --------------------------------------------------------------

    def _check(self, name: str) -> None:
        if name in self.fail:
            raise SupabaseClientError(f"{name} failed", code="TEST_FAILURE")

    def _tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def add_artwork(self, owner_id, **fields) -> dict[str, Any]:
        artwork_id = str(uuid4())
        row = {
            "id": artwork_id,
            "account_id": str(owner_id),
            "title": "Untitled",
            "artist_name": None,
            "image_url": None,
        }
        row.update(fields)
        self.artworks[artwork_id] = row
        return row

    def add_account(self, account_id, name: str, role: str | None = None) -> None:
        public_data = {"role": role} if role else {}
        self.accounts[str(account_id)] = {"id": str(account_id), "name": name, "public_data": public_data}

    def notifications_for(self, user_id) -> list[dict[str, Any]]:
        return [n for n in self.notifications if n["user_id"] == str(user_id)]

    # -- artworks -------------------------------------------------------------

    def fetch_artwork(self, artwork_id, columns=None):
        self._check("fetch_artwork")
        row = self.artworks.get(str(artwork_id))
        return dict(row) if row else None

    def fetch_artworks(self, artwork_ids, columns=None):
        self._check("fetch_artworks")
        return [dict(self.artworks[str(a)]) for a in artwork_ids if str(a) in self.artworks]

    def fetch_owned_artwork_ids(self, account_id):
        self._check("fetch_owned_artwork_ids")
        return [a["id"] for a in self.artworks.values() if a["account_id"] == str(account_id)]

    def update_artwork(self, artwork_id, update_data, expected_owner_id=None):
        self._check("update_artwork")
        row = self.artworks.get(str(artwork_id))
        if row is None:
            return None
        if expected_owner_id is not None and row["account_id"] != str(expected_owner_id):
            return None
        row.update(update_data)
        return dict(row)

    # -- accounts -------------------------------------------------------------

    def fetch_account(self, account_id):
        self._check("fetch_account")
        return self.accounts.get(str(account_id))

    def fetch_accounts(self, account_ids):
        self._check("fetch_accounts")
        return {str(a): self.accounts[str(a)] for a in account_ids if str(a) in self.accounts}

    # -- requests -------------------------------------------------------------

    def fetch_request(self, request_id):
        self._check("fetch_request")
        row = self.requests.get(str(request_id))
        return dict(row) if row else None

    def find_pending_request(self, artwork_id, requested_by):
        self._check("find_pending_request")
        for row in self.requests.values():
            if (
                row["artwork_id"] == str(artwork_id)
                and row["requested_by"] == str(requested_by)
                and row["status"] == "pending"
            ):
                return {"id": row["id"], "request_type": row["request_type"]}
        return None

    def fetch_pending_requests_for_artworks(self, artwork_ids):
        self._check("fetch_pending_requests_for_artworks")
        ids = {str(a) for a in artwork_ids}
        rows = [
            dict(r) for r in self.requests.values()
            if r["artwork_id"] in ids and r["status"] == "pending"
        ]
        return sorted(rows, key=lambda r: r["requested_at"], reverse=True)

    def fetch_requests_by_requester(self, requested_by, status=None):
        self._check("fetch_requests_by_requester")
        rows = [
            dict(r) for r in self.requests.values()
            if r["requested_by"] == str(requested_by) and (status is None or r["status"] == status)
        ]
        return sorted(rows, key=lambda r: r["requested_at"], reverse=True)

    def insert_request(self, data):
        self._check("insert_request")
        row = {
            "id": str(uuid4()),
            "requested_at": self._tick(),
            "reviewed_by": None,
            "reviewed_at": None,
            "review_message": None,
        }
        row.update(data)
        self.requests[row["id"]] = row
        return dict(row)

    def transition_request(self, request_id, update_data):
        self._check("transition_request")
        row = self.requests.get(str(request_id))
        if row is None or row["status"] != "pending":
            return None
        row.update(update_data)
        return dict(row)

    def release_request(self, request_id, reviewed_by):
        self._check("release_request")
        row = self.requests.get(str(request_id))
        if row is None or row["status"] != "approved" or row["reviewed_by"] != str(reviewed_by):
            return None
        row.update(status="pending", reviewed_by=None, reviewed_at=None, review_message=None)
        return dict(row)

    # -- notifications --------------------------------------------------------

    def insert_notification(self, data):
        self._check("insert_notification")
        row = {"id": str(uuid4()), "read": False, "created_at": self._tick()}
        row.update(data)
        self.notifications.append(row)
        return dict(row)

    def fetch_notifications(self, user_id, unread_only=False, limit=50):
        self._check("fetch_notifications")
        rows = [
            dict(n) for n in self.notifications
            if n["user_id"] == str(user_id) and not (unread_only and n["read"])
        ]
        return sorted(rows, key=lambda n: n["created_at"], reverse=True)[:limit]

    def count_unread_notifications(self, user_id):
        self._check("count_unread_notifications")
        return sum(1 for n in self.notifications if n["user_id"] == str(user_id) and not n["read"])

    def mark_notifications_read(self, user_id, notification_id=None):
        self._check("mark_notifications_read")
        updated = []
        for n in self.notifications:
            if n["user_id"] != str(user_id):
                continue
            if notification_id is not None and n["id"] != str(notification_id):
                continue
            if notification_id is None and n["read"]:
                continue
            n["read"] = True
            updated.append(dict(n))
        return updated


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store():
    """In-memory data store patched into every service module."""
    fake = InMemorySupabase()
    patchers = [patch(target, fake) for target in PATCH_TARGETS]
    for p in patchers:
        p.start()
    yield fake
    for p in patchers:
        p.stop()


@pytest.fixture
def alice(store):
    """Artwork owner."""
    user = AuthUser(id=uuid4(), email="alice@example.com")
    store.add_account(user.id, "Alice Gallery", role="gallery")
    return user


@pytest.fixture
def bob(store):
    """A non-owner who files requests."""
    user = AuthUser(id=uuid4(), email="bob@example.com")
    store.add_account(user.id, "Bob Painter", role="artist")
    return user


@pytest.fixture
def carol(store):
    """Another non-owner."""
    user = AuthUser(id=uuid4(), email="carol@example.com")
    store.add_account(user.id, "Carol Collector", role="collector")
    return user


@pytest.fixture
def artwork(store, alice):
    """An artwork owned by alice, painted by Bob Painter."""
    return store.add_artwork(
        alice.id,
        title="Blue Study",
        artist_name="Bob Painter",
        medium="Oil on canvas",
        dimensions="40 x 50 cm",
        image_url="https://cdn.example.com/blue-study.jpg",
    )
