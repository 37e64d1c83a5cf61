"""
Theaters Router - Theaters and their showtimes
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from api.schemas.theaters import Theater, TheaterCreate, TheaterListResponse, TheaterShowtimesResponse
from api.dependencies import get_repository
from api.repositories.base import BaseRepository, is_valid_id

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_theater_or_404(repo: BaseRepository, theater_id: str) -> dict:
    if not is_valid_id(theater_id):
        raise HTTPException(status_code=400, detail="Invalid theater ID")
    theater = repo.get_theater(theater_id)
    if theater is None:
        raise HTTPException(status_code=404, detail="Theater not found")
    return theater


@router.get("", response_model=TheaterListResponse)
def list_theaters(
    location: Optional[str] = Query(None, description="Location substring (case-insensitive)"),
    repo: BaseRepository = Depends(get_repository)
) -> TheaterListResponse:
    try:
        theaters = repo.list_theaters(location=location)
        return TheaterListResponse(
            count=len(theaters),
            theaters=[Theater.model_validate(t) for t in theaters]
        )
    except Exception as e:
        logger.error(f"Theater list failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch theaters")


@router.get("/{theater_id}", response_model=Theater)
def get_theater(theater_id: str, repo: BaseRepository = Depends(get_repository)) -> Theater:
    try:
        return Theater.model_validate(_get_theater_or_404(repo, theater_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Theater lookup failed for {theater_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch theater")


@router.get("/{theater_id}/showtimes", response_model=TheaterShowtimesResponse)
def get_theater_showtimes(
    theater_id: str,
    movie_id: Optional[str] = Query(None, description="Only showtimes of this movie"),
    repo: BaseRepository = Depends(get_repository)
) -> TheaterShowtimesResponse:
    """Showtimes of a theater ordered by start time."""
    try:
        theater = _get_theater_or_404(repo, theater_id)
        showtimes = theater.get("showtimes", [])
        if movie_id:
            showtimes = [s for s in showtimes if s.get("movie_id") == movie_id]
        showtimes = sorted(showtimes, key=lambda s: s["start_time"])

        return TheaterShowtimesResponse(
            theater_id=theater_id,
            movie_id=movie_id,
            count=len(showtimes),
            showtimes=showtimes
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Showtime lookup failed for {theater_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch showtimes")


@router.post("", response_model=Theater, status_code=201)
def create_theater(request: TheaterCreate, repo: BaseRepository = Depends(get_repository)) -> Theater:
    try:
        theater_id = repo.insert_theater(request.model_dump())
        logger.info(f"Created theater '{request.name}' ({theater_id})")
        return Theater.model_validate(repo.get_theater(theater_id))
    except Exception as e:
        logger.error(f"Theater creation failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create theater")
