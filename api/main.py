"""
ShowSnap Booking API - FastAPI Application

Main entry point for the API server.
Environment-agnostic: configuration reads from settings (.env file).
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from showsnap.settings import get_settings
from api.dependencies import lifespan_handler
from api.routers import admin, bookings, health, movies, payments, theaters, tmdb, users

# Get settings
cfg = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, cfg.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Application factory for creating FastAPI app.

    Configuration is loaded from settings (reads from .env file).

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="ShowSnap Booking API",
        description="Movies, theaters, seat bookings and an admin panel for a cinema chain",
        version="0.1.0",
        lifespan=lifespan_handler  # Handles startup/shutdown
    )

    # CORS configuration from settings
    logger.info(f"Configuring CORS with origins: {cfg.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount routers
    app.include_router(movies.router, prefix="/api/movies", tags=["movies"])
    app.include_router(theaters.router, prefix="/api/theaters", tags=["theaters"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(bookings.router, prefix="/api/bookings", tags=["bookings"])
    app.include_router(payments.router, prefix="/api/payments", tags=["payments"])
    app.include_router(tmdb.router, prefix="/api/tmdb", tags=["tmdb"])
    app.include_router(health.router, prefix="/api/health", tags=["health"])

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint - API info"""
        return {
            "name": "ShowSnap Booking API",
            "message": "Welcome to the ShowSnap API",
            "version": "0.1.0",
            "environment": cfg.env,
            "status": "running",
            "docs": "/docs",
            "health": "/api/health/ready"
        }

    logger.info(f"FastAPI application created (env={cfg.env})")

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting API server on {cfg.api_host}:{cfg.api_port}")
    logger.info(f"Environment: {cfg.env}")
    logger.info(f"Reload: {cfg.api_reload}")
    logger.info(f"Workers: {cfg.api_workers}")

    uvicorn.run(
        "api.main:app",
        host=cfg.api_host,
        port=cfg.api_port,
        reload=cfg.api_reload,
        workers=cfg.api_workers if not cfg.api_reload else 1,  # Workers only work without reload
        log_level=cfg.log_level.lower()
    )
