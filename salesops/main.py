"""
FastAPI application entry point for the Sales Ops API.

Configures logging and CORS, registers the API routers, and starts the ASGI
server when executed directly.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salesops import __version__
from salesops.api.location_consensus import router as location_consensus_router
from salesops.core.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    The service holds no connections or caches, so startup and shutdown only log.
    """
    logger.info(
        f"Sales Ops API starting (cluster radius {settings.cluster_radius_meters}m)"
    )
    yield
    logger.info("Sales Ops API shutting down")


# Create FastAPI application
app = FastAPI(
    title="Sales Ops API",
    version=__version__,
    description=(
        "FastAPI backend for the sales-operations dashboard. "
        "Provides GPS consensus location-fraud detection over shop visits."
    ),
    lifespan=lifespan,
)

# Next.js dashboard calls the API directly from the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(location_consensus_router)  # Has its own /location-consensus prefix


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Sales Ops API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "salesops.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
