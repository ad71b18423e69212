"""
Main FastAPI application for the step counter.

This module provides the application entry point and configuration.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core.config import settings
from .api import steps

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Step Counter API",
    description="Streaming accelerometer step detection",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(steps.router, prefix="/api/steps", tags=["steps"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Step Counter API", "version": __version__}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


def configure_logging(level: str = None) -> None:
    """Configure root logging for entry points."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    configure_logging()
    logger.info("Default strategy: %s", settings.pipeline.detector.algorithm.value)


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run(
        "stepcounter.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
