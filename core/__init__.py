# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the provenance workflow's business logic:
# - models/: Pydantic schemas for data validation
# - services/: Request submission, review, approval and notifications
#
# Database access goes through lib/supabase_client.py; HTTP concerns stay
# in app/.
# =============================================================================
