from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING
import logging

import numpy as np
from requests.exceptions import RequestException
from tqdm.auto import tqdm

from showsnap.adapters.tmdb.tmdb import TMDB_API
from showsnap.constants import FALLBACK_MOVIES, MOVIE_TITLES_TO_SEED, SEED_THEATERS
from showsnap.pipelines.theater_linking import link_movie_to_theaters
from showsnap.preprocessing.movie_documents import build_movie_document, parse_release_date
from showsnap.utils.reproducibility import get_random_state

if TYPE_CHECKING:
    from api.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    movies_inserted: int = 0
    skipped_titles: List[str] = field(default_factory=list)
    fallback_titles: List[str] = field(default_factory=list)
    theaters_linked: int = 0
    showtimes_created: int = 0


def _fetch_or_none(fetch: Callable[..., Any], *args) -> Any:
    """Run one TMDB call, None once its retries are exhausted."""
    try:
        return fetch(*args)
    except RequestException as e:
        logger.error(f"TMDB fetch failed [{getattr(fetch, '__name__', fetch)}{args}]: {e}")
        return None


def fetch_genres(tmdb_api: TMDB_API) -> List[Dict[str, Any]]:
    return _fetch_or_none(tmdb_api.get_genres) or []


def fetch_movie_data(
    tmdb_api: TMDB_API,
    title: str,
    genre_list: List[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> Optional[Dict[str, Any]]:
    """
    Search a title on TMDB (every supported locale) and build its movie document.

    Videos, credits and details are fetched one after the other; any of them
    failing only leaves the corresponding fields empty.
    """
    hit = tmdb_api.search_movie_in_languages(title)
    if hit is None:
        logger.warning(f"TMDB search failed for: {title}")
        return None

    result, language = hit
    tmdb_id = result["id"]

    videos = _fetch_or_none(tmdb_api.get_movie_videos, tmdb_id)
    credits = _fetch_or_none(tmdb_api.get_movie_credits, tmdb_id)
    details = _fetch_or_none(tmdb_api.get_movie_details, tmdb_id)

    return build_movie_document(
        result=result,
        language=language,
        details=details,
        credits=credits,
        videos=videos,
        genre_list=genre_list,
        image_url=tmdb_api.image_url,
        now=now,
    )


def fallback_documents(fallbacks: List[Dict[str, Any]], existing_titles: List[str]) -> List[Dict[str, Any]]:
    """Hand-written movies for titles TMDB did not provide."""
    documents = []
    for movie in fallbacks:
        if movie["title"] in existing_titles:
            continue
        doc = {
            "cast": [],
            "theater_ids": [],
            "embedded_theaters": [],
            **movie,
        }
        if isinstance(doc.get("release_date"), str):
            doc["release_date"] = parse_release_date(doc["release_date"])
        documents.append(doc)
    return documents


def run_seed_pipeline(
    repo: "BaseRepository",
    tmdb_api: TMDB_API,
    titles: Optional[List[str]] = None,
    theaters: Optional[List[Dict[str, str]]] = None,
    fallbacks: Optional[List[Dict[str, Any]]] = None,
    rng: Optional[np.random.RandomState] = None,
    today: Optional[date] = None,
) -> SeedReport:
    """
    Rebuild the movie catalog from TMDB and schedule every movie in every theater.

    Existing movies are deleted and theater schedules emptied first. Titles TMDB
    has no data for are skipped; fallback movies fill in for missing titles.
    Each movie then gets today's daily showtimes in each theater, with a random
    set of blocked seats per showtime.
    """
    titles = MOVIE_TITLES_TO_SEED if titles is None else titles
    theaters = SEED_THEATERS if theaters is None else theaters
    fallbacks = FALLBACK_MOVIES if fallbacks is None else fallbacks
    rng = rng if rng is not None else get_random_state()
    today = today or date.today()
    report = SeedReport()

    deleted = repo.delete_all_movies()
    reset = repo.reset_theater_links()
    logger.info(f"Cleared {deleted} existing movies and reset {reset} theater movie titles/showtimes")

    genre_list = fetch_genres(tmdb_api)
    logger.info(f"Fetched {len(genre_list)} TMDB genres")

    movies_to_insert: List[Dict[str, Any]] = []
    for title in tqdm(titles, desc="Fetching movies from TMDB..."):
        try:
            movie = fetch_movie_data(tmdb_api, title, genre_list)
        except Exception as e:
            logger.error(f"Failed to fetch {title}: {e}", exc_info=True)
            report.skipped_titles.append(title)
            continue

        if movie is None:
            logger.warning(f"Skipped: {title} - no data")
            report.skipped_titles.append(title)
            continue
        movies_to_insert.append(movie)

    extra = fallback_documents(fallbacks, [m["title"] for m in movies_to_insert])
    report.fallback_titles = [m["title"] for m in extra]
    movies_to_insert.extend(extra)

    logger.info(f"Movies prepared for insertion: {len(movies_to_insert)}")
    movie_ids = repo.insert_movies(movies_to_insert)
    report.movies_inserted = len(movie_ids)
    logger.info(f"Seeded {report.movies_inserted} movies successfully")

    theater_docs = [repo.upsert_theater(t["name"], t["location"]) for t in theaters]
    report.theaters_linked = len(theater_docs)

    for movie_id, movie in tqdm(list(zip(movie_ids, movies_to_insert)), desc="Linking movies & theaters..."):
        _, embedded = link_movie_to_theaters(
            repo,
            movie_id=movie_id,
            movie_title=movie["title"],
            theaters=theater_docs,
            day=today,
            rng=rng,
        )
        report.showtimes_created += sum(len(t["showtimes"]) for t in embedded)

    logger.info("Finished linking movies & theaters with showtimes")
    return report
