"""
Practice Analytics API

A FastAPI application exposing the analytics aggregation engine to the
dashboard presentation layer.

Features:
- Snapshot computation over caller-supplied appointments, payments and patients
- Calendar-aware periods with previous-period deltas
- Health check endpoint
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from practice_analytics import __version__
from practice_analytics.api import analytics
from practice_analytics.core.config import ANALYTICS_TIMEZONE, LOG_LEVEL
from practice_analytics.core.constants import CORS_ORIGINS

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger(__name__)
logger.info(f"Practice Analytics API starting (timezone: {ANALYTICS_TIMEZONE})")


# Create FastAPI application
app = FastAPI(
    title="Practice Analytics",
    description="Dashboard statistics and chart series for clinician practices",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(
    analytics.router,
    prefix="/api/analytics",
    tags=["analytics"],
    responses={
        400: {"description": "Invalid range"},
        500: {"description": "Internal server error"},
    },
)


@app.get(
    "/",
    summary="Root endpoint",
    description="Returns basic API information",
)
async def root() -> dict[str, str]:
    """Get API information."""
    return {
        "message": "Practice Analytics API",
        "version": __version__,
        "status": "running"
    }


@app.get(
    "/health",
    summary="Health check",
    description="Returns the health status of the API",
)
async def health_check() -> dict[str, str]:
    """Check if the API is healthy and responding."""
    return {"status": "healthy"}


# Global exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions globally."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": "internal_error"},
    )
