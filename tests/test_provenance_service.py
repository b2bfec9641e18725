# =============================================================================
# tests/test_provenance_service.py - Owner Edit Tests
# =============================================================================
# Tests for OwnerAuthorization, direct provenance edits and batch edits.
# =============================================================================

from uuid import uuid4

import pytest

from app.exceptions import NotArtworkOwnerError
from core.models import ProvenanceEdit, ProvenanceUpdateFields
from core.services.provenance_service import OwnerAuthorization, ProvenanceService


# =============================================================================
# OwnerAuthorization
# =============================================================================

class TestOwnerAuthorization:
    """The proof object that replaces a skip-ownership-check flag."""

    def test_verify_owner(self, artwork, alice):
        auth = OwnerAuthorization.verify(artwork, alice.id)

        assert auth.artwork_id == artwork["id"]
        assert auth.owner_id == str(alice.id)
        assert auth.covers(artwork["id"])
        assert not auth.covers(str(uuid4()))

    def test_verify_non_owner_raises(self, artwork, bob):
        with pytest.raises(NotArtworkOwnerError):
            OwnerAuthorization.verify(artwork, bob.id)

    def test_cannot_be_constructed_directly(self, artwork, bob):
        with pytest.raises(TypeError):
            OwnerAuthorization(artwork["id"], str(bob.id), "Blue Study")

    def test_apply_update_rejects_other_actor_types(self, store, artwork, alice):
        with pytest.raises(TypeError):
            ProvenanceService.apply_update(alice, ProvenanceUpdateFields(title="X"))


# =============================================================================
# Direct edits
# =============================================================================

class TestUpdateProvenance:
    """Tests for ProvenanceService.update_provenance."""

    def test_owner_partial_update(self, store, artwork, alice):
        result = ProvenanceService.update_provenance(
            artwork["id"],
            ProvenanceEdit(title="  Renamed  ", dimensions=None, value_is_public=False),
            alice,
        )

        assert result.success is True
        updated = store.artworks[artwork["id"]]
        assert updated["title"] == "Renamed"
        assert updated["dimensions"] is None
        assert updated["value_is_public"] is False
        assert updated["medium"] == "Oil on canvas"
        assert updated["updated_by"] == str(alice.id)

    def test_default_path_notifies_owner(self, store, artwork, alice):
        ProvenanceService.update_provenance(artwork["id"], ProvenanceEdit(medium="Acrylic"), alice)

        [notification] = store.notifications_for(alice.id)
        assert notification["type"] == "artwork_updated"
        assert notification["metadata"]["fields"] == ["medium"]

    def test_notification_can_be_suppressed(self, store, artwork, alice):
        ProvenanceService.update_provenance(
            artwork["id"], ProvenanceEdit(medium="Acrylic"), alice, notify=False
        )

        assert store.notifications == []

    def test_non_owner_rejected(self, store, artwork, bob):
        result = ProvenanceService.update_provenance(
            artwork["id"], ProvenanceEdit(title="Hijacked"), bob
        )

        assert result.success is False
        assert result.error == "You do not have permission to edit this artwork"
        assert store.artworks[artwork["id"]]["title"] == "Blue Study"

    def test_signed_out_rejected(self, store, artwork):
        result = ProvenanceService.update_provenance(artwork["id"], ProvenanceEdit(title="X"), None)

        assert result.code == "AUTHENTICATION_REQUIRED"

    def test_missing_artwork(self, store, alice):
        result = ProvenanceService.update_provenance(str(uuid4()), ProvenanceEdit(title="X"), alice)

        assert result.code == "ARTWORK_NOT_FOUND"

    def test_authorization_for_other_artwork_rejected(self, store, artwork, alice):
        other = store.add_artwork(alice.id, title="Other")
        auth = OwnerAuthorization.verify(store.fetch_artwork(other["id"]), alice.id)

        result = ProvenanceService.update_provenance(artwork["id"], ProvenanceEdit(title="X"), auth)

        assert result.code == "NOT_ARTWORK_OWNER"
        assert store.artworks[artwork["id"]]["title"] == "Blue Study"

    def test_stale_authorization_matches_nothing(self, store, artwork, alice, bob):
        auth = OwnerAuthorization.verify(store.fetch_artwork(artwork["id"]), alice.id)
        store.artworks[artwork["id"]]["account_id"] = str(bob.id)

        result = ProvenanceService.update_provenance(artwork["id"], ProvenanceEdit(title="X"), auth)

        assert result.code == "NOT_ARTWORK_OWNER"
        assert store.artworks[artwork["id"]]["title"] == "Blue Study"

    def test_empty_edit_rejected(self, store, artwork, alice):
        result = ProvenanceService.update_provenance(artwork["id"], ProvenanceEdit(), alice)

        assert result.code == "INVALID_UPDATE_FIELDS"

    def test_store_failure(self, store, artwork, alice):
        store.fail.add("update_artwork")

        result = ProvenanceService.update_provenance(artwork["id"], ProvenanceEdit(title="X"), alice)

        assert result.success is False
        assert result.error.startswith("Failed to update provenance")
        assert result.status_code == 502

    def test_store_failure_reports_store_message(self, store, artwork, alice):
        store.fail.add("update_artwork")

        result = ProvenanceService.update_provenance(artwork["id"], ProvenanceEdit(title="X"), alice)

        assert result.error == "Failed to update provenance: update_artwork failed"
        assert result.code == "DATA_STORE_ERROR"


# =============================================================================
# Batch edits
# =============================================================================

class TestBatchUpdateProvenance:
    """Tests for ProvenanceService.batch_update_provenance."""

    def test_updates_every_owned_artwork(self, store, artwork, alice):
        second = store.add_artwork(alice.id, title="Red Study")

        result = ProvenanceService.batch_update_provenance(
            [artwork["id"], second["id"]],
            ProvenanceEdit(production_location="Paris"),
            alice,
        )

        assert result.success is True
        assert result.updated_count == 2
        assert result.error is None
        assert store.artworks[artwork["id"]]["production_location"] == "Paris"
        assert store.artworks[second["id"]]["production_location"] == "Paris"
        assert store.notifications == []

    def test_one_foreign_artwork_aborts_batch(self, store, artwork, alice, bob):
        foreign = store.add_artwork(bob.id, title="Bob's")

        result = ProvenanceService.batch_update_provenance(
            [artwork["id"], foreign["id"]], ProvenanceEdit(edition="1/10"), alice
        )

        assert result.success is False
        assert result.error == "You do not have permission to edit some of these artworks"
        assert "edition" not in store.artworks[artwork["id"]]

    def test_partial_failure_reports_count(self, store, artwork, alice):
        missing_id = str(uuid4())

        result = ProvenanceService.batch_update_provenance(
            [artwork["id"], missing_id], ProvenanceEdit(edition="1/10"), alice
        )

        assert result.success is True
        assert result.updated_count == 1
        assert f"Artwork {missing_id}: Artwork not found" in result.error

    def test_total_failure(self, store, artwork, alice):
        store.fail.add("update_artwork")

        result = ProvenanceService.batch_update_provenance(
            [artwork["id"]], ProvenanceEdit(edition="1/10"), alice
        )

        assert result.success is False
        assert result.updated_count == 0
        assert result.error.startswith("Failed to update artworks:")
        assert "update_artwork failed" in result.error
        assert result.code == "BATCH_UPDATE_FAILED"
        assert result.status_code == 502

    def test_total_failure_takes_first_error_status(self, store, alice):
        missing = [str(uuid4()), str(uuid4())]

        result = ProvenanceService.batch_update_provenance(
            missing, ProvenanceEdit(edition="1/10"), alice
        )

        assert result.success is False
        assert result.updated_count == 0
        assert result.code == "BATCH_UPDATE_FAILED"
        assert result.status_code == 404
        assert f"Artwork {missing[0]}: Artwork not found" in result.error

    def test_empty_selection(self, store, alice):
        result = ProvenanceService.batch_update_provenance([], ProvenanceEdit(edition="1"), alice)

        assert result.code == "INVALID_UPDATE_FIELDS"

    def test_duplicate_ids_updated_once(self, store, artwork, alice):
        result = ProvenanceService.batch_update_provenance(
            [artwork["id"], artwork["id"]], ProvenanceEdit(edition="2/10"), alice
        )

        assert result.updated_count == 1

    def test_signed_out(self, store, artwork):
        result = ProvenanceService.batch_update_provenance(
            [artwork["id"]], ProvenanceEdit(edition="1"), None
        )

        assert result.code == "AUTHENTICATION_REQUIRED"
