from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import os
import time
import uvicorn
from dotenv import load_dotenv

# Load .env before the settings module is imported
load_dotenv()

from dedcore_landing.core.config import settings
from dedcore_landing.core.exceptions import ConfigurationError, DependencyError
from dedcore_landing.routers import admin, newsletter
from dedcore_landing.services.email_sender import build_email_sender
from dedcore_landing.services.session_guard import AdminSessionGuard
from dedcore_landing.services.subscriber_store import build_subscriber_store

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the external clients once and share them through app.state"""
    logger.info("🚀 Starting DedCore landing API...")
    app.state.started_at = time.monotonic()
    app.state.subscriber_store = build_subscriber_store(settings)
    app.state.email_sender = build_email_sender(settings)
    app.state.session_guard = AdminSessionGuard.from_settings(settings)
    if not settings.ADMIN_PASSWORD:
        logger.warning("⚠️ ADMIN_PASSWORD not set, admin login is disabled")
    if settings.ADMIN_SESSION_VERIFY and settings.uses_default_secret_key:
        logger.warning("⚠️ SECRET_KEY is the built-in default, admin session tokens can be forged")
    logger.info("✅ DedCore landing API started")
    yield
    logger.info("🔄 Shutting down DedCore landing API...")

app = FastAPI(
    title="DedCore Landing API",
    description="Newsletter signup and admin dashboard backend for the DedCore site",
    version=VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.allowed_hosts
)

app.include_router(newsletter.router, prefix="/api")
app.include_router(admin.router, prefix="/api/admin")

@app.get("/health")
async def health_check():
    """Health check, including a subscriber table probe"""
    base = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.NODE_ENV,
        "version": VERSION,
    }
    try:
        await app.state.subscriber_store.count_records()
        return {**base, "status": "healthy", "database": "connected"}
    except (ConfigurationError, DependencyError) as e:
        return {**base, "status": "unhealthy", "database": "disconnected", "error": str(e)}

@app.get("/")
async def root():
    return {
        "message": "Welcome to the DedCore landing API",
        "version": VERSION,
        "docs": "/docs"
    }

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Uniform error envelope"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.detail,
            "statusCode": exc.status_code
        },
        headers=getattr(exc, "headers", None)
    )

if __name__ == "__main__":
    # Render injects PORT; reload only outside production
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", settings.API_PORT)),
        reload=not settings.is_production,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True
    )
