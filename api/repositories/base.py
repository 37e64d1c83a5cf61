"""
Base Repository - Abstract interface for data access

This defines the contract that all repository implementations must follow.
Allows swapping between MongoDB (deployments) and local files (dev, tests)
without changing the rest of the API code.

Documents are plain dicts with a string `id`; ids are 24-char hex ObjectIds in
every implementation.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, List, Dict, Any, Tuple

from bson import ObjectId

from api.schemas.movies import MovieQuery

Document = Dict[str, Any]


def is_valid_id(value: Optional[str]) -> bool:
    """True for strings that look like a document id (24-char hex ObjectId)"""
    return isinstance(value, str) and ObjectId.is_valid(value)


class BaseRepository(ABC):
    """Abstract base class for data repositories"""

    # ---- movies ----

    @abstractmethod
    def query_movies(self, query: MovieQuery) -> Tuple[List[Document], int]:
        """
        Filter, sort and paginate movies.

        Returns:
            (movies in the requested page, number of movies matching the filters)
        """
        pass

    @abstractmethod
    def list_movies(
        self,
        is_upcoming: Optional[bool] = None,
        reference_date: Optional[date] = None
    ) -> List[Document]:
        """All movies, newest release first, optionally split on release date."""
        pass

    @abstractmethod
    def get_movie(self, movie_id: str) -> Optional[Document]:
        pass

    @abstractmethod
    def insert_movie(self, movie: Document) -> str:
        """Insert a movie and return its id."""
        pass

    @abstractmethod
    def insert_movies(self, movies: List[Document]) -> List[str]:
        pass

    @abstractmethod
    def update_movie(self, movie_id: str, updates: Document) -> Optional[Document]:
        """Apply a partial update; returns the updated movie or None when missing."""
        pass

    @abstractmethod
    def delete_movie(self, movie_id: str) -> Optional[Document]:
        """Delete a movie; returns the deleted document or None when missing."""
        pass

    @abstractmethod
    def delete_all_movies(self) -> int:
        pass

    @abstractmethod
    def get_genres(self) -> List[str]:
        """Distinct, non-blank genre values."""
        pass

    @abstractmethod
    def count_movies(self) -> int:
        pass

    @abstractmethod
    def set_movie_theaters(
        self,
        movie_id: str,
        theater_ids: List[str],
        embedded_theaters: List[Document]
    ) -> None:
        """Replace the theater links and embedded theater copies of a movie."""
        pass

    # ---- theaters ----

    @abstractmethod
    def list_theaters(self, location: Optional[str] = None, limit: Optional[int] = None) -> List[Document]:
        """Theaters in insertion order, optionally filtered by location substring."""
        pass

    @abstractmethod
    def get_theater(self, theater_id: str) -> Optional[Document]:
        pass

    @abstractmethod
    def insert_theater(self, theater: Document) -> str:
        pass

    @abstractmethod
    def upsert_theater(self, name: str, location: str) -> Document:
        """
        Find a theater by name (creating it if needed) and reset it:
        location set, showtimes and movie titles emptied, status Active.
        """
        pass

    @abstractmethod
    def reset_theater_links(self) -> int:
        """Empty showtimes and movie titles of every theater."""
        pass

    @abstractmethod
    def add_showtimes(self, theater_id: str, showtimes: List[Document], movie_title: str) -> None:
        """Append showtimes to a theater and add the movie title to its set of titles."""
        pass

    # ---- seats ----

    @abstractmethod
    def reserve_seats(self, movie_id: str, theater_id: str, showtime_id: str, seats: List[str]) -> bool:
        """
        Block seats on a showtime, in the theater copy and in the movie copy.

        Returns False (and changes nothing) when the showtime is unknown or any
        seat is already blocked.
        """
        pass

    @abstractmethod
    def release_seats(self, movie_id: str, theater_id: str, showtime_id: str, seats: List[str]) -> None:
        """Undo reserve_seats."""
        pass

    # ---- bookings ----

    @abstractmethod
    def insert_booking(self, booking: Document) -> str:
        pass

    @abstractmethod
    def get_booking(self, booking_id: str) -> Optional[Document]:
        pass

    @abstractmethod
    def list_bookings(
        self,
        user_id: Optional[str] = None,
        movie_id: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[List[Document], int]:
        """Bookings newest first, with the total matching count."""
        pass

    @abstractmethod
    def update_booking(self, booking_id: str, updates: Document) -> Optional[Document]:
        pass

    @abstractmethod
    def count_bookings(self) -> int:
        pass

    # ---- users ----

    @abstractmethod
    def insert_user(self, user: Document) -> str:
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[Document]:
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[Document]:
        pass

    @abstractmethod
    def list_users(self, skip: int = 0, limit: Optional[int] = None) -> Tuple[List[Document], int]:
        pass

    @abstractmethod
    def count_users(self) -> int:
        pass

    # ---- lifecycle ----

    def ping(self) -> bool:
        """Check the backing store is reachable."""
        return True

    def close(self) -> None:
        """Release connections / flush state."""
        pass
