"""
Admin Service - Movie creation from the admin panel

A new movie is scheduled right away: today's daily showtimes are pushed to
each selected theater and embedded in the movie.
"""

import logging
from datetime import date
from typing import List, Optional

from showsnap.constants import DEFAULT_THEATERS_FOR_NEW_MOVIE, NOT_AVAILABLE, STATUS_NOW_SHOWING
from showsnap.pipelines.theater_linking import link_movie_to_theaters
from showsnap.preprocessing.movie_documents import movie_status
from api.repositories.base import BaseRepository, Document, is_valid_id
from api.schemas.admin import AdminMovieCreate

logger = logging.getLogger(__name__)


class MissingFieldsError(ValueError):
    def __init__(self, fields: List[str]):
        self.fields = fields
        super().__init__(f"Missing fields: {', '.join(fields)}")


def resolve_theaters(repo: BaseRepository, theater_ids: List[str]) -> List[Document]:
    """Existing theaters among `theater_ids`; the first few theaters when none are given."""
    if not theater_ids:
        return repo.list_theaters(limit=DEFAULT_THEATERS_FOR_NEW_MOVIE)

    theaters = []
    for theater_id in theater_ids:
        theater = repo.get_theater(theater_id) if is_valid_id(theater_id) else None
        if theater is None:
            logger.warning(f"Skipping unknown theater {theater_id}")
            continue
        theaters.append(theater)
    return theaters


def create_movie_with_theaters(
    repo: BaseRepository,
    request: AdminMovieCreate,
    today: Optional[date] = None
) -> Document:
    missing = request.missing_fields()
    if missing:
        raise MissingFieldsError(missing)

    today = today or date.today()
    movie = {
        "title": request.title,
        "description": request.description,
        "genre": request.genre or NOT_AVAILABLE,
        "rating": request.rating,
        "duration": request.duration,
        "poster_url": request.poster_url,
        "trailer_url": request.trailer_url,
        "release_date": request.release_date,
        "language": request.language,
        "tags": [],
        "is_featured": False,
        "status": movie_status(request.release_date) if request.release_date else STATUS_NOW_SHOWING,
        "cast": [c.model_dump() for c in request.cast],
        "theater_ids": [],
        "embedded_theaters": [],
    }
    movie_id = repo.insert_movie(movie)

    theaters = resolve_theaters(repo, request.theater_ids())
    link_movie_to_theaters(repo, movie_id, request.title, theaters, day=today)
    logger.info(f"Admin created '{request.title}' in {len(theaters)} theaters")

    return repo.get_movie(movie_id)
