"""
Movies Router - Browse, filter and create movies
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from api.schemas.movies import (
    GenresResponse,
    Movie,
    MovieCreate,
    MovieDetail,
    MovieListResponse,
    MovieQuery,
)
from api.dependencies import get_repository
from api.repositories.base import BaseRepository, is_valid_id

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=MovieListResponse)
def list_movies(
    is_upcoming: Optional[str] = Query(None, description="'true' for upcoming, 'false' for released"),
    genre: Optional[str] = Query(None, description="Genre substring (case-insensitive)"),
    min_rating: Optional[str] = Query(None, description="Minimum rating"),
    language: Optional[str] = Query(None, description="Language substring (case-insensitive)"),
    released_after: Optional[str] = Query(None, description="Released on or after this date"),
    location: Optional[str] = Query(None, description="Theater location substring"),
    title: Optional[str] = Query(None, description="Search in titles and descriptions"),
    sort_by: Optional[str] = Query(None, description="'rating' or 'releaseDate' (descending)"),
    page: Optional[str] = Query(None, description="Page number (1-based)"),
    limit: Optional[str] = Query(None, description="Movies per page (max 100)"),
    repo: BaseRepository = Depends(get_repository)
) -> MovieListResponse:
    """
    List movies with optional filters, sorting and pagination.

    Parameters that do not parse are ignored instead of rejected.
    """
    try:
        query = MovieQuery.from_params(
            is_upcoming=is_upcoming,
            genre=genre,
            min_rating=min_rating,
            language=language,
            released_after=released_after,
            location=location,
            title=title,
            sort_by=sort_by,
            page=page,
            limit=limit,
        )
        movies, total = repo.query_movies(query)

        return MovieListResponse(
            count=len(movies),
            total=total,
            page=query.page,
            total_pages=query.total_pages(total),
            movies=[Movie.model_validate(m) for m in movies]
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Movie list failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movies")


@router.get("/genres", response_model=GenresResponse)
def list_genres(repo: BaseRepository = Depends(get_repository)) -> GenresResponse:
    try:
        return GenresResponse(genres=repo.get_genres())
    except Exception as e:
        logger.error(f"Genre list failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch genres")


@router.get("/{movie_id}", response_model=MovieDetail)
def get_movie(movie_id: str, repo: BaseRepository = Depends(get_repository)) -> MovieDetail:
    """Single movie, with the theaters and showtimes it plays at."""
    if not is_valid_id(movie_id):
        raise HTTPException(status_code=400, detail="Invalid movie ID")

    try:
        movie = repo.get_movie(movie_id)
        if movie is None:
            raise HTTPException(status_code=404, detail="Movie not found")

        return MovieDetail.model_validate({**movie, "theaters": movie.get("embedded_theaters", [])})

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Movie lookup failed for {movie_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movie")


@router.post("", response_model=Movie, status_code=201)
def create_movie(request: MovieCreate, repo: BaseRepository = Depends(get_repository)) -> Movie:
    try:
        movie = request.model_dump()
        movie["id"] = repo.insert_movie(movie)
        logger.info(f"Created movie '{request.title}' ({movie['id']})")
        return Movie.model_validate(movie)

    except Exception as e:
        logger.error(f"Movie creation failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create movie")
