"""
FastAPI application entry point for the reservation availability service.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from core.settings import settings
from core.logging import setup_logging
from db.session import close_db
from apps.api.routers import availability


# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(
        "Starting reservation availability service",
        extra={
            "app_name": settings.app_name,
            "environment": settings.app_env,
            "restaurant_timezone": settings.restaurant_timezone,
        }
    )

    yield

    # Shutdown
    logger.info("Shutting down reservation availability service")
    await close_db()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Time-slot and table availability for restaurant reservations",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Include routers
app.include_router(availability.router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "environment": settings.app_env
    }


@app.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns application health status.
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "environment": settings.app_env
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "apps.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
