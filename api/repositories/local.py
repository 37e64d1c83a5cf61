"""
Local File Repository - File-based data access implementation

Keeps every collection in memory and, when a directory is configured,
persists them to a single joblib file after each write.
Movie queries run through a pandas DataFrame built from the movie documents.
Environment-agnostic: the directory comes from settings (reads from .env).
"""

import copy
import functools
import logging
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Optional, List, Dict, Any, Tuple

import pandas as pd
from bson import ObjectId

from showsnap.constants import THEATER_STATUS_ACTIVE
from showsnap.io.readers import read_joblib
from showsnap.io.writers import atomic_write_joblib
from api.repositories.base import BaseRepository, Document
from api.schemas.movies import MovieQuery

logger = logging.getLogger(__name__)

COLLECTIONS = ("movies", "theaters", "bookings", "users")
STORE_FILENAME = "showsnap_store.joblib"


def _locked(method):
    """Run a repository method under the instance lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def _contains(series: pd.Series, term: str) -> pd.Series:
    return series.str.contains(term, case=False, regex=False, na=False)


def build_movie_frame(movies: List[Document]) -> pd.DataFrame:
    """One row per movie with the columns the movie filters look at."""
    return pd.DataFrame({
        "pos": range(len(movies)),
        "title": pd.Series([m.get("title") or "" for m in movies], dtype=object),
        "description": pd.Series([m.get("description") or "" for m in movies], dtype=object),
        "genre": pd.Series([m.get("genre") or "" for m in movies], dtype=object),
        "language": pd.Series([m.get("language") or "" for m in movies], dtype=object),
        "rating": pd.to_numeric(pd.Series([m.get("rating") for m in movies], dtype=object), errors="coerce"),
        "release_date": pd.to_datetime(pd.Series([m.get("release_date") for m in movies], dtype=object)),
        "locations": pd.Series(
            [[(t.get("location") or "").casefold() for t in m.get("embedded_theaters") or []] for m in movies],
            dtype=object,
        ),
    })


def filter_movie_frame(df: pd.DataFrame, query: MovieQuery) -> pd.DataFrame:
    """Apply the MovieQuery filters (AND-ed) and its sort to a movie frame."""
    mask = pd.Series(True, index=df.index)

    if query.is_upcoming is True:
        mask &= df["release_date"] > query.today_start
    elif query.is_upcoming is False:
        mask &= df["release_date"] <= query.today_start

    if query.released_after is not None:
        mask &= df["release_date"] >= query.released_after

    if query.location:
        term = query.location.casefold()
        mask &= df["locations"].apply(lambda locs: any(term in loc for loc in locs))

    if query.genre:
        mask &= _contains(df["genre"], query.genre)

    if query.min_rating is not None:
        mask &= df["rating"] >= query.min_rating

    if query.language:
        mask &= _contains(df["language"], query.language)

    if query.title:
        mask &= _contains(df["title"], query.title) | _contains(df["description"], query.title)

    df = df[mask]

    # mergesort is stable: ties keep insertion order
    if query.sort_by == "rating":
        df = df.sort_values("rating", ascending=False, kind="mergesort", na_position="last")
    elif query.sort_by == "release_date":
        df = df.sort_values("release_date", ascending=False, kind="mergesort", na_position="last")
    return df


class LocalFileRepository(BaseRepository):
    """
    Repository implementation using local file storage.

    Every public method holds the instance RLock.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self._lock = threading.RLock()
        self._collections: Dict[str, List[Document]] = {name: [] for name in COLLECTIONS}
        self.store_path: Optional[Path] = Path(data_dir) / STORE_FILENAME if data_dir is not None else None

        if self.store_path is not None and self.store_path.exists():
            logger.info(f"Loading local store from {self.store_path}")
            loaded = read_joblib(self.store_path)
            for name in COLLECTIONS:
                self._collections[name] = list(loaded.get(name, []))
            logger.info(
                "Loaded " + ", ".join(f"{len(self._collections[n])} {n}" for n in COLLECTIONS)
            )

        logger.info(f"LocalFileRepository initialized (store: {self.store_path or 'memory only'})")

    # ---- internals ----

    def _save(self) -> None:
        if self.store_path is None:
            return
        atomic_write_joblib(self._collections, self.store_path)

    def _insert(self, collection: str, doc: Document) -> str:
        new_id = str(ObjectId())
        stored = copy.deepcopy({k: v for k, v in doc.items() if k != "id"})
        stored["id"] = new_id
        self._collections[collection].append(stored)
        return new_id

    def _find(self, collection: str, doc_id: str) -> Optional[Document]:
        for doc in self._collections[collection]:
            if doc["id"] == doc_id:
                return doc
        return None

    def _get(self, collection: str, doc_id: str) -> Optional[Document]:
        doc = self._find(collection, doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def _update(self, collection: str, doc_id: str, updates: Document) -> Optional[Document]:
        doc = self._find(collection, doc_id)
        if doc is None:
            return None
        doc.update(copy.deepcopy({k: v for k, v in updates.items() if k != "id"}))
        self._save()
        return copy.deepcopy(doc)

    # ---- movies ----

    @_locked
    def query_movies(self, query: MovieQuery) -> Tuple[List[Document], int]:
        movies = self._collections["movies"]
        if not movies:
            return [], 0

        df = filter_movie_frame(build_movie_frame(movies), query)
        total = len(df)
        page = df.iloc[query.skip:query.skip + query.limit]
        return [copy.deepcopy(movies[pos]) for pos in page["pos"]], total

    @_locked
    def list_movies(
        self,
        is_upcoming: Optional[bool] = None,
        reference_date: Optional[date] = None
    ) -> List[Document]:
        movies = self._collections["movies"]
        if not movies:
            return []

        query = MovieQuery(
            is_upcoming=is_upcoming,
            sort_by="release_date",
            reference_date=reference_date or date.today(),
        )
        df = filter_movie_frame(build_movie_frame(movies), query)
        return [copy.deepcopy(movies[pos]) for pos in df["pos"]]

    @_locked
    def get_movie(self, movie_id: str) -> Optional[Document]:
        return self._get("movies", movie_id)

    @_locked
    def insert_movie(self, movie: Document) -> str:
        new_id = self._insert("movies", movie)
        self._save()
        return new_id

    @_locked
    def insert_movies(self, movies: List[Document]) -> List[str]:
        ids = [self._insert("movies", m) for m in movies]
        self._save()
        return ids

    @_locked
    def update_movie(self, movie_id: str, updates: Document) -> Optional[Document]:
        return self._update("movies", movie_id, updates)

    @_locked
    def delete_movie(self, movie_id: str) -> Optional[Document]:
        doc = self._find("movies", movie_id)
        if doc is None:
            return None
        self._collections["movies"].remove(doc)
        self._save()
        return doc

    @_locked
    def delete_all_movies(self) -> int:
        deleted = len(self._collections["movies"])
        self._collections["movies"] = []
        self._save()
        return deleted

    @_locked
    def get_genres(self) -> List[str]:
        seen: List[str] = []
        for movie in self._collections["movies"]:
            genre = movie.get("genre")
            if isinstance(genre, str) and genre.strip() and genre not in seen:
                seen.append(genre)
        return sorted(seen)

    @_locked
    def count_movies(self) -> int:
        return len(self._collections["movies"])

    @_locked
    def set_movie_theaters(
        self,
        movie_id: str,
        theater_ids: List[str],
        embedded_theaters: List[Document]
    ) -> None:
        self._update("movies", movie_id, {"theater_ids": theater_ids, "embedded_theaters": embedded_theaters})

    # ---- theaters ----

    @_locked
    def list_theaters(self, location: Optional[str] = None, limit: Optional[int] = None) -> List[Document]:
        theaters = self._collections["theaters"]
        if location and location.strip():
            term = location.strip().casefold()
            theaters = [t for t in theaters if term in (t.get("location") or "").casefold()]
        if limit:
            theaters = theaters[:limit]
        return copy.deepcopy(theaters)

    @_locked
    def get_theater(self, theater_id: str) -> Optional[Document]:
        return self._get("theaters", theater_id)

    @_locked
    def insert_theater(self, theater: Document) -> str:
        new_id = self._insert("theaters", {"showtimes": [], "movie_titles": [], **theater})
        self._save()
        return new_id

    @_locked
    def upsert_theater(self, name: str, location: str) -> Document:
        reset = {
            "location": location,
            "showtimes": [],
            "movie_titles": [],
            "status": THEATER_STATUS_ACTIVE,
        }
        existing = next((t for t in self._collections["theaters"] if t.get("name") == name), None)
        if existing is None:
            new_id = self._insert("theaters", {"name": name, **reset})
        else:
            existing.update(reset)
            new_id = existing["id"]
        self._save()
        return self._get("theaters", new_id)

    @_locked
    def reset_theater_links(self) -> int:
        for theater in self._collections["theaters"]:
            theater["showtimes"] = []
            theater["movie_titles"] = []
        self._save()
        return len(self._collections["theaters"])

    @_locked
    def add_showtimes(self, theater_id: str, showtimes: List[Document], movie_title: str) -> None:
        theater = self._find("theaters", theater_id)
        if theater is None:
            return
        theater.setdefault("showtimes", []).extend(copy.deepcopy(showtimes))
        titles = theater.setdefault("movie_titles", [])
        if movie_title not in titles:
            titles.append(movie_title)
        self._save()

    # ---- seats ----

    def _theater_showtime(self, theater_id: str, showtime_id: str) -> Optional[Document]:
        theater = self._find("theaters", theater_id)
        if theater is None:
            return None
        return next((s for s in theater.get("showtimes", []) if s.get("showtime_id") == showtime_id), None)

    def _movie_showtimes(self, movie_id: str, showtime_id: str) -> List[Document]:
        movie = self._find("movies", movie_id)
        if movie is None:
            return []
        return [
            s
            for t in movie.get("embedded_theaters", [])
            for s in t.get("showtimes", [])
            if s.get("showtime_id") == showtime_id
        ]

    @_locked
    def reserve_seats(self, movie_id: str, theater_id: str, showtime_id: str, seats: List[str]) -> bool:
        showtime = self._theater_showtime(theater_id, showtime_id)
        if showtime is None or showtime.get("movie_id") != movie_id:
            return False
        if any(seat in showtime.get("blocked_seats", []) for seat in seats):
            return False

        for copy_ in [showtime, *self._movie_showtimes(movie_id, showtime_id)]:
            blocked = copy_.setdefault("blocked_seats", [])
            blocked.extend(s for s in seats if s not in blocked)
            copy_["available_seats"] = copy_.get("available_seats", 0) - len(seats)
        self._save()
        return True

    @_locked
    def release_seats(self, movie_id: str, theater_id: str, showtime_id: str, seats: List[str]) -> None:
        copies = self._movie_showtimes(movie_id, showtime_id)
        showtime = self._theater_showtime(theater_id, showtime_id)
        if showtime is not None:
            copies.append(showtime)

        for copy_ in copies:
            copy_["blocked_seats"] = [s for s in copy_.get("blocked_seats", []) if s not in seats]
            copy_["available_seats"] = copy_.get("available_seats", 0) + len(seats)
        self._save()

    # ---- bookings ----

    @_locked
    def insert_booking(self, booking: Document) -> str:
        new_id = self._insert("bookings", booking)
        self._save()
        return new_id

    @_locked
    def get_booking(self, booking_id: str) -> Optional[Document]:
        return self._get("bookings", booking_id)

    @_locked
    def list_bookings(
        self,
        user_id: Optional[str] = None,
        movie_id: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[List[Document], int]:
        bookings = [
            (i, b) for i, b in enumerate(self._collections["bookings"])
            if (not user_id or b.get("user_id") == user_id)
            and (not movie_id or b.get("movie_id") == movie_id)
        ]
        bookings.sort(key=lambda item: (item[1].get("created_at") or datetime.min, item[0]), reverse=True)
        matching = [b for _, b in bookings]
        page = matching[skip:skip + limit] if limit else matching[skip:]
        return copy.deepcopy(page), len(matching)

    @_locked
    def update_booking(self, booking_id: str, updates: Document) -> Optional[Document]:
        return self._update("bookings", booking_id, updates)

    @_locked
    def count_bookings(self) -> int:
        return len(self._collections["bookings"])

    # ---- users ----

    @_locked
    def insert_user(self, user: Document) -> str:
        new_id = self._insert("users", user)
        self._save()
        return new_id

    @_locked
    def get_user(self, user_id: str) -> Optional[Document]:
        return self._get("users", user_id)

    @_locked
    def get_user_by_email(self, email: str) -> Optional[Document]:
        user = next((u for u in self._collections["users"] if u.get("email") == email), None)
        return copy.deepcopy(user) if user is not None else None

    @_locked
    def list_users(self, skip: int = 0, limit: Optional[int] = None) -> Tuple[List[Document], int]:
        users = self._collections["users"]
        page = users[skip:skip + limit] if limit else users[skip:]
        return copy.deepcopy(page), len(users)

    @_locked
    def count_users(self) -> int:
        return len(self._collections["users"])
