from datetime import date
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING
import logging

import numpy as np

from showsnap.preprocessing.showtimes import build_daily_showtimes

if TYPE_CHECKING:
    from api.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def link_movie_to_theaters(
    repo: "BaseRepository",
    movie_id: str,
    movie_title: str,
    theaters: List[Dict[str, Any]],
    day: date,
    rng: Optional[np.random.RandomState] = None,
) -> Tuple[List[str], List[Dict[str, Any]]]:
    """
    Schedule a movie in every given theater for `day`.

    Each theater gets the daily showtimes pushed to its own showtime array (and
    the title added to its movie titles); the same showtimes, with the same
    showtime ids, are embedded in the movie next to the theater name and location.

    Returns:
        (linked theater ids, embedded theater copies stored on the movie)
    """
    theater_ids: List[str] = []
    embedded: List[Dict[str, Any]] = []

    for theater in theaters:
        showtimes = build_daily_showtimes(day, movie_id, rng=rng)
        repo.add_showtimes(theater["id"], showtimes, movie_title)

        theater_ids.append(theater["id"])
        embedded.append({
            "name": theater.get("name"),
            "location": theater.get("location", ""),
            "showtimes": showtimes,
        })

    repo.set_movie_theaters(movie_id, theater_ids, embedded)
    logger.debug(f"Linked '{movie_title}' to {len(theater_ids)} theaters")
    return theater_ids, embedded
