"""
Admin Router - Admin panel: movie management, bookings, users and stats

Every endpoint requires a caller with the admin role.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from showsnap.constants import DEFAULT_USERS_PAGE_SIZE, MAX_PAGE, MAX_PAGE_SIZE
from api.schemas.admin import (
    AdminBooking,
    AdminBookingsResponse,
    AdminMovieCreate,
    AdminMovieList,
    AdminStats,
    AdminUsersResponse,
    BulkMovieCreate,
    BulkMovieResponse,
    DeletedMovieResponse,
    MessageResponse,
    MovieMessageResponse,
    MovieUpdate,
)
from api.schemas.movies import Movie
from api.schemas.users import User
from api.dependencies import get_repository, require_admin
from api.repositories.base import BaseRepository, is_valid_id
from api.services.admin_service import MissingFieldsError, create_movie_with_theaters

router = APIRouter(dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


def _check_movie_id(movie_id: str) -> None:
    if not is_valid_id(movie_id):
        raise HTTPException(status_code=400, detail="Invalid movie ID")


@router.get("/ping", response_model=MessageResponse)
def ping() -> MessageResponse:
    return MessageResponse(message="Admin access granted")


@router.get("/stats", response_model=AdminStats)
def get_stats(repo: BaseRepository = Depends(get_repository)) -> AdminStats:
    try:
        return AdminStats(
            users=repo.count_users(),
            bookings=repo.count_bookings(),
            movies=repo.count_movies()
        )
    except Exception as e:
        logger.error(f"Admin stats failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch admin stats")


# ---- movies ----

@router.get("/movies", response_model=AdminMovieList)
def list_movies(
    is_upcoming: Optional[bool] = Query(None, description="Only upcoming (true) or released (false) movies"),
    repo: BaseRepository = Depends(get_repository)
) -> AdminMovieList:
    try:
        movies = repo.list_movies(is_upcoming=is_upcoming)
        return AdminMovieList(count=len(movies), movies=[Movie.model_validate(m) for m in movies])
    except Exception as e:
        logger.error(f"Admin movie list failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movies")


@router.get("/movies/{movie_id}", response_model=Movie)
def get_movie(movie_id: str, repo: BaseRepository = Depends(get_repository)) -> Movie:
    _check_movie_id(movie_id)
    try:
        movie = repo.get_movie(movie_id)
        if movie is None:
            raise HTTPException(status_code=404, detail="Movie not found")
        return Movie.model_validate(movie)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Admin movie lookup failed for {movie_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movie")


@router.post("/movies", response_model=MovieMessageResponse, status_code=201)
def create_movie(
    request: AdminMovieCreate,
    repo: BaseRepository = Depends(get_repository)
) -> MovieMessageResponse:
    """
    Create a movie and schedule today's showtimes in the selected theaters
    (the first theaters when none are selected).
    """
    try:
        movie = create_movie_with_theaters(repo, request)
        return MovieMessageResponse(
            message="Movie created and linked to theaters",
            movie=Movie.model_validate(movie)
        )
    except MissingFieldsError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Admin movie creation failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create movie")


@router.post("/movies/bulk", response_model=BulkMovieResponse, status_code=201)
def create_movies_bulk(
    request: BulkMovieCreate,
    repo: BaseRepository = Depends(get_repository)
) -> BulkMovieResponse:
    if not request.movies:
        raise HTTPException(status_code=400, detail="No movies provided")

    try:
        documents = [m.model_dump() for m in request.movies]
        ids = repo.insert_movies(documents)
        created = [Movie.model_validate({**doc, "id": movie_id}) for doc, movie_id in zip(documents, ids)]
        logger.info(f"Admin bulk-created {len(created)} movies")
        return BulkMovieResponse(message=f"{len(created)} movies added", movies=created)
    except Exception as e:
        logger.error(f"Admin bulk creation failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to add movies")


@router.put("/movies/{movie_id}", response_model=MovieMessageResponse)
def update_movie(
    movie_id: str,
    request: MovieUpdate,
    repo: BaseRepository = Depends(get_repository)
) -> MovieMessageResponse:
    _check_movie_id(movie_id)
    updates = request.to_update()
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        movie = repo.update_movie(movie_id, updates)
        if movie is None:
            raise HTTPException(status_code=404, detail="Movie not found")
        logger.info(f"Admin updated movie {movie_id}: {sorted(updates)}")
        return MovieMessageResponse(message="Movie updated", movie=Movie.model_validate(movie))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Admin movie update failed for {movie_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update movie")


@router.delete("/movies/{movie_id}", response_model=DeletedMovieResponse)
def delete_movie(movie_id: str, repo: BaseRepository = Depends(get_repository)) -> DeletedMovieResponse:
    _check_movie_id(movie_id)
    try:
        movie = repo.delete_movie(movie_id)
        if movie is None:
            raise HTTPException(status_code=404, detail="Movie not found")
        logger.info(f"Admin deleted movie {movie_id}")
        return DeletedMovieResponse(message="Movie deleted", deleted=Movie.model_validate(movie))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Admin movie deletion failed for {movie_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete movie")


# ---- bookings & users ----

@router.get("/bookings", response_model=AdminBookingsResponse)
def list_bookings(
    user_id: Optional[str] = Query(None, description="Only bookings of this user"),
    movie_id: Optional[str] = Query(None, description="Only bookings of this movie"),
    page: int = Query(1, ge=1, le=MAX_PAGE, description="Page number (1-based)"),
    limit: int = Query(DEFAULT_USERS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Bookings per page"),
    repo: BaseRepository = Depends(get_repository)
) -> AdminBookingsResponse:
    """All bookings, newest first, with their user and movie populated."""
    try:
        bookings, total = repo.list_bookings(
            user_id=user_id,
            movie_id=movie_id,
            skip=(page - 1) * limit,
            limit=limit
        )

        users, movies = {}, {}
        items = []
        for booking in bookings:
            uid, mid = booking.get("user_id"), booking.get("movie_id")
            if uid not in users:
                users[uid] = repo.get_user(uid) if is_valid_id(uid) else None
            if mid not in movies:
                movies[mid] = repo.get_movie(mid) if is_valid_id(mid) else None

            user = users[uid]
            items.append(AdminBooking.model_validate({
                **booking,
                "user": {"name": user.get("name"), "email": user.get("email")} if user else None,
                "movie": movies[mid],
            }))

        return AdminBookingsResponse(count=len(items), total=total, page=page, bookings=items)
    except Exception as e:
        logger.error(f"Admin booking list failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch bookings")


@router.get("/users", response_model=AdminUsersResponse)
def list_users(
    page: int = Query(1, ge=1, le=MAX_PAGE, description="Page number (1-based)"),
    limit: int = Query(DEFAULT_USERS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Users per page"),
    repo: BaseRepository = Depends(get_repository)
) -> AdminUsersResponse:
    try:
        users, total = repo.list_users(skip=(page - 1) * limit, limit=limit)
        return AdminUsersResponse(
            count=len(users),
            total=total,
            page=page,
            users=[User.model_validate(u) for u in users]
        )
    except Exception as e:
        logger.error(f"Admin user list failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch users")
