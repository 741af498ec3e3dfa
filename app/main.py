# ========================================
# app/main.py
# ========================================

import asyncio
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import database
from app.config import Settings
from app.logging_config import setup_logging
from app.utils.errors import register_error_handlers
from app.utils.rate_limit import RateLimitMiddleware, SlidingWindowLimiter

# Jobs
from app.routes.job import router as job_router

# Applications
from app.routes.application import router as application_router

API_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, client=None) -> FastAPI:
    """Build the API. ``client`` lets callers supply a ready Mongo client."""
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Job Board API",
        description="Job postings and applications with filtering and validation",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    # serialises read-validate-mutate sequences across requests
    app.state.write_lock = asyncio.Lock()

    # ===========================
    # MIDDLEWARE
    # ===========================
    app.state.limiter = SlidingWindowLimiter(
        settings.rate_limit_requests, settings.rate_limit_window_seconds
    )
    app.add_middleware(RateLimitMiddleware, limiter=app.state.limiter)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # ===========================
    # DATABASE EVENTS
    # ===========================
    @app.on_event("startup")
    async def start_db():
        """Connect to MongoDB on startup"""
        await database.connect_to_mongo(app, settings, client)

    @app.on_event("shutdown")
    async def stop_db():
        """Close MongoDB connection on shutdown"""
        await database.close_mongo_connection(app)

    # ===========================
    # REGISTER ROUTERS
    # ===========================
    app.include_router(job_router, tags=["Jobs"])
    app.include_router(application_router, tags=["Applications"])

    # ===========================
    # ROOT ENDPOINTS
    # ===========================
    @app.get("/")
    async def root():
        """API root endpoint"""
        return {
            "status": "Job Board API Running",
            "version": API_VERSION,
            "documentation": "/docs",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        if await database.ping(app):
            return {"status": "healthy", "database": "connected", "version": API_VERSION}
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "unreachable", "version": API_VERSION},
        )

    logger.info("Job Board API %s configured", API_VERSION)
    return app


app = create_app()
