# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Provenance API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import ProvenanceAPIException, provenance_exception_handler
from app.routers import health, provenance_requests, artworks, notifications
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Handlers are stateless; there are no background tasks to start or stop.
    """
    logger.info(f"Starting Provenance API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if settings.OWNERSHIP_REQUIRES_ARTIST_MATCH:
        logger.info("Ownership requests restricted to the artwork's named artist")

    yield

    logger.info("Shutting down Provenance API")


# Create FastAPI application
app = FastAPI(
    title="Provenance API",
    description="""
## Artwork Provenance & Ownership Requests

Artists, galleries and collectors keep an artwork's provenance record with its
current owner. Anyone else can propose a change, and the owner decides.

### How It Works

1. **Submit** - A non-owner proposes field changes or asks for ownership
2. **Review** - The owner lists pending requests on artworks they own now
3. **Respond** - Approve (fields applied / ownership transferred) or deny
4. **Notify** - The other party is notified at every step

### Quick Start

```bash
# 1. Propose a new title
curl -X POST http://localhost:8000/api/v1/artworks/{id}/requests \\
  -H "Authorization: Bearer $TOKEN" -H "Content-Type: application/json" \\
  -d '{"request_type": "provenance_update", "update_fields": {"title": "New Title"}}'

# 2. Owner lists pending requests
curl http://localhost:8000/api/v1/requests/pending -H "Authorization: Bearer $OWNER_TOKEN"

# 3. Owner approves
curl -X POST http://localhost:8000/api/v1/requests/{request_id}/respond \\
  -H "Authorization: Bearer $OWNER_TOKEN" -H "Content-Type: application/json" \\
  -d '{"action": "approve"}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Who the current access token belongs to",
        },
        {
            "name": "Requests",
            "description": "Submit and review provenance update and ownership requests",
        },
        {
            "name": "Artworks",
            "description": "Direct provenance edits by the current owner",
        },
        {
            "name": "Notifications",
            "description": "Notifications emitted by the request workflow",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(ProvenanceAPIException)
async def handle_provenance_exception(request: Request, exc: ProvenanceAPIException):
    """Handle custom Provenance API exceptions."""
    return await provenance_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

app.include_router(
    provenance_requests.router,
    prefix="/api/v1",
    tags=["Requests"]
)

app.include_router(
    artworks.router,
    prefix="/api/v1",
    tags=["Artworks"]
)

app.include_router(
    notifications.router,
    prefix="/api/v1/notifications",
    tags=["Notifications"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Provenance API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
