# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# HTTP surface of the Provenance API:
# - main.py: App entry point, middleware, error handlers, router mounting
# - config.py: Settings loaded from the environment
# - exceptions.py: Error taxonomy shared with the service layer
# - auth/: Supabase access token verification
# - routers/: Request, artwork, notification and health endpoints
#
# Handlers stay thin and delegate to the services in core/.
# =============================================================================
