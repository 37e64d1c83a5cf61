"""
API Dependencies - Singleton state management and FastAPI dependency injection

Holds the repository (MongoDB or local files, chosen from settings) and the
TMDB API wrapper, and resolves the calling user from the X-User-Id header.
"""

import asyncio
import logging
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import Depends, Header, HTTPException

from showsnap.adapters.tmdb.client import TMDBNotConfiguredError
from showsnap.adapters.tmdb.tmdb import TMDB_API
from showsnap.settings import get_settings
from api.repositories.base import BaseRepository, is_valid_id
from api.repositories.local import LocalFileRepository
from api.repositories.mongo import MongoRepository

logger = logging.getLogger(__name__)


class AppState:
    """
    Global application state - holds the repository and external clients.

    Singleton pattern: one instance shared across all requests.
    """

    def __init__(self):
        self.repository: Optional[BaseRepository] = None
        self.tmdb_api: Optional[TMDB_API] = None

        # State tracking for lazy initialization
        self._initialized = False
        self._initializing = False
        self._initialization_lock = asyncio.Lock()

    def _create_repository(self) -> BaseRepository:
        cfg = get_settings()
        if cfg.storage_backend == "local":
            logger.info(f"Using local file storage in {cfg.local_store_dir}")
            return LocalFileRepository(cfg.local_store_dir)

        logger.info("Using MongoDB storage")
        repo = MongoRepository(cfg.mongo)
        repo.ensure_indexes()
        return repo

    async def initialize(self) -> None:
        """
        Create the repository (required) and the TMDB client (optional).
        """
        # Prevent duplicate initialization
        async with self._initialization_lock:
            if self._initialized:
                logger.debug("AppState already initialized")
                return

            self._initializing = True
            logger.info("Initializing AppState...")

            try:
                self.repository = await asyncio.to_thread(self._create_repository)

                try:
                    self.tmdb_api = TMDB_API()
                    logger.info("TMDB client ready")
                except TMDBNotConfiguredError as e:
                    logger.warning(f"{e}. TMDB endpoints will answer 500.")
                    self.tmdb_api = None

                self._initialized = True
                logger.info("AppState initialization complete!")

            except Exception as e:
                logger.error(f"Failed to initialize AppState: {e}", exc_info=True)
                raise
            finally:
                self._initializing = False

    def is_ready(self) -> bool:
        """Check if app is ready to serve requests"""
        return self._initialized and self.repository is not None

    def get_status(self) -> dict:
        """Get current initialization status"""
        return {
            "initialized": self._initialized,
            "initializing": self._initializing,
            "ready": self.is_ready(),
            "storage_backend": get_settings().storage_backend,
            "tmdb_configured": self.tmdb_api is not None,
        }

    async def shutdown(self) -> None:
        if self.repository is not None:
            self.repository.close()
        self.repository = None
        self.tmdb_api = None
        self._initialized = False


# Global singleton instance
app_state = AppState()


def get_app_state() -> AppState:
    """
    FastAPI dependency to access app state.

    Usage in routers:
        @router.get("/example")
        async def example(state: AppState = Depends(get_app_state)):
            repo = state.repository
            ...
    """
    return app_state


def get_repository(state: AppState = Depends(get_app_state)) -> BaseRepository:
    """
    FastAPI dependency to access repository.

    Usage in routers:
        @router.get("/example")
        async def example(repo: BaseRepository = Depends(get_repository)):
            movie = repo.get_movie(movie_id)
            ...
    """
    if not state.is_ready():
        raise HTTPException(status_code=503, detail="Service not ready")
    return state.repository


def get_tmdb_api(state: AppState = Depends(get_app_state)) -> TMDB_API:
    if state.tmdb_api is None:
        raise HTTPException(status_code=500, detail="TMDB API key not configured")
    return state.tmdb_api


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    repo: BaseRepository = Depends(get_repository)
) -> dict:
    """Resolve the caller from the X-User-Id header (401 when missing or unknown)."""
    if not x_user_id or not is_valid_id(x_user_id):
        raise HTTPException(status_code=401, detail="Missing or invalid X-User-Id header")
    user = repo.get_user(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Access denied. Admins only.")
    return user


@asynccontextmanager
async def lifespan_handler(app):
    """
    FastAPI lifespan context manager for startup/shutdown.

    Usage in main.py:
        app = FastAPI(lifespan=lifespan_handler)
    """
    logger.info("FastAPI starting up...")
    await app_state.initialize()

    yield  # App is now running

    logger.info("FastAPI shutting down...")
    await app_state.shutdown()
    logger.info("Shutdown complete")
