"""
What-If Scheduling Backend

Main FastAPI application entry point. Configures routes, middleware,
and application lifecycle events.

Version: 1.0.0
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

# Import logging configuration (initializes logging)
from whatif.logging_config import get_logger, log_access
from whatif import config
from whatif.db import init_db

# Import route modules
from whatif.routes import health
from whatif.routes import simulations

# Get logger for this module
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle manager.

    Creates missing tables on startup and logs startup/shutdown.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("What-If Backend Starting")
    logger.info(f"Version: {app.version}")
    logger.info("=" * 60)
    init_db()

    yield  # Application runs here

    # Shutdown
    logger.info("What-If Backend Shutting Down")
    logger.info("=" * 60)


# Create FastAPI application instance
app = FastAPI(
    title="What-If Component API",
    description="Stores course-planning simulation sets with their scenarios, assignments and stress metrics.",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Access log line per request: method, path, status and duration."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    log_access(request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.get("/")
async def root():
    return PlainTextResponse("What-If Component API")


# Include route modules
app.include_router(health.router, tags=["Health"])
app.include_router(simulations.router, tags=["Simulations"])

logger.info("All routes registered successfully")
