# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Provenance API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_provenance_requests.py: Submit / list / respond workflow
# - test_provenance_service.py: Owner edits and OwnerAuthorization
# - test_notifications.py: Notification sink and inbox
# - test_supabase_client.py: Query construction in the Supabase wrapper
# - test_auth.py: Access token verification
# - test_routes.py: HTTP endpoints via TestClient
#
# Run tests with: poetry run pytest
# =============================================================================
