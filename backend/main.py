"""
SchoolFees FastAPI Backend

Fee management for schools. School administrators sign in with Supabase
Auth and are scoped to one school; a single superadmin signs in with
configured credentials and sees every school.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from routers import session, superadmin
from auth.supabase_client import supabase_client
from auth.middleware import AuthMiddleware
from middleware.error_handler import ErrorHandlerMiddleware, add_exception_handlers

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("SchoolFees Backend starting...")
    logger.info(f"   Environment: {settings.environment}")

    if settings.supabase_url and settings.supabase_anon_key:
        supabase_client.initialize(settings.supabase_url, settings.supabase_anon_key)
        logger.info("   Supabase Auth: configured")
    else:
        logger.warning("   Supabase Auth: NOT configured (school administrator routes will return 503)")

    # Superadmin settings are checked per request; only warn here
    missing = settings.missing_superadmin_settings()
    if missing:
        logger.warning(f"   Superadmin login unavailable, missing: {', '.join(missing)}")

    yield

    logger.info("SchoolFees Backend shutting down...")


app = FastAPI(
    title="SchoolFees API",
    description="School fee management with per-school administrators and a global superadmin",
    version="0.1.0",
    lifespan=lifespan,
)

add_exception_handlers(app)

# Must be added BEFORE CORSMiddleware so error responses get CORS headers
app.add_middleware(ErrorHandlerMiddleware)

_cors_origins = settings.cors_origins_list or []
if settings.environment == "development":
    _cors_origins = list(set(_cors_origins + [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]))

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    # Cookies carry the superadmin session
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
)

# Authentication middleware (enforces centralized auth policies)
# See auth/policies.py for route-level policy configuration
app.add_middleware(AuthMiddleware)

# Include routers
app.include_router(superadmin.router, tags=["Superadmin"])
app.include_router(session.router, prefix="/api/session", tags=["Session"])


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "status": "healthy",
        "service": "SchoolFees",
        "version": "0.1.0",
    }


@app.get("/health")
async def health_check():
    """Configuration health of both auth schemes. Secrets are never echoed."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "supabase_configured": supabase_client.is_configured(),
        "superadmin_configured": not settings.missing_superadmin_settings(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=True)
