import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.middleware.exceptions import register_exception_handlers
from app.middleware.security import HTTPSRedirectMiddleware, SecurityHeadersMiddleware
from app.routers import (
    auth,
    blog,
    geocoding,
    health,
    lands,
    profile,
    properties,
    uploads,
    users,
    wizard,
)
from app.utils.cache import close_redis

logger = logging.getLogger("brymar")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the upload directory on startup, close Redis on shutdown."""
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    logger.info(f"Brymar API starting ({settings.environment})")
    try:
        yield
    finally:
        await close_redis()
        logger.info("Brymar API stopped")


app = FastAPI(
    title="Brymar",
    description="Real estate listings: properties, lands and blog with guided creation wizards",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
# Security headers (first - applies to all responses)
app.add_middleware(SecurityHeadersMiddleware)

# HTTPS redirect (production only)
app.add_middleware(HTTPSRedirectMiddleware, force_https=False)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
# Public
app.include_router(health.router)
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(properties.router, prefix="/api/properties", tags=["properties"])
app.include_router(lands.router, prefix="/api/lands", tags=["lands"])
app.include_router(blog.router, prefix="/api/blog", tags=["blog"])

# Authenticated
app.include_router(profile.router, prefix="/api/profile", tags=["profile"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(properties.dashboard_router, prefix="/api/dashboard/properties", tags=["dashboard"])
app.include_router(lands.dashboard_router, prefix="/api/dashboard/lands", tags=["dashboard"])
app.include_router(blog.dashboard_router, prefix="/api/dashboard/blog", tags=["dashboard"])
app.include_router(wizard.router, prefix="/api/wizard", tags=["wizard"])
app.include_router(uploads.router, prefix="/api/uploads", tags=["uploads"])
app.include_router(geocoding.router, prefix="/api/geocoding", tags=["geocoding"])

# Uploaded media (served by the reverse proxy in production)
app.mount("/media", StaticFiles(directory=settings.upload_dir, check_dir=False), name="media")
