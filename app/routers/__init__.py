# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - provenance_requests.py: Submit, list and review provenance/ownership requests
# - artworks.py: Direct owner edits of provenance (single and batch)
# - notifications.py: Read and acknowledge notifications
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import provenance_requests
from . import artworks
from . import notifications

__all__ = [
    "health",
    "provenance_requests",
    "artworks",
    "notifications",
]
