"""
Movie API Schemas - Movie documents, embedded showtimes and the movie list query

Field names match the documents written by the repositories and the seed pipeline.
"""

import math
from datetime import date, datetime, time, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from showsnap.constants import DEFAULT_PAGE_SIZE, MAX_PAGE, MAX_PAGE_SIZE, NOT_AVAILABLE, STATUS_NOW_SHOWING


def coerce_date_string(value: Any) -> Any:
    """Accept plain 'YYYY-MM-DD' strings for datetime fields."""
    if isinstance(value, str) and len(value) == 10:
        try:
            return datetime.strptime(value, "%Y-%m-%d")
        except ValueError:
            return value
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored datetimes are naive UTC, as pymongo hands them back."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CastMember(BaseModel):
    name: str = Field(..., description="Actor name")
    role: str = Field("", description="Character played")
    photo_url: str = Field("", description="Profile picture url")


class Showtime(BaseModel):
    """A single screening. The same showtime_id is used in the theater and the movie copy."""

    showtime_id: Optional[str] = Field(None, description="Showtime identifier")
    start_time: datetime = Field(..., description="Screening start")
    screen: str = Field("Screen 1", description="Screen name")
    available_seats: int = Field(0, ge=0, description="Seats still free")
    blocked_seats: List[str] = Field(default_factory=list, description="Seat codes already taken")
    movie_id: Optional[str] = Field(None, description="Movie shown")


class EmbeddedTheater(BaseModel):
    """Copy of a theater stored inside a movie document"""

    name: str = Field(..., description="Theater name")
    location: str = Field("", description="City or area")
    showtimes: List[Showtime] = Field(default_factory=list)


class MovieCreate(BaseModel):
    """Movie document as written to the database"""

    title: str = Field(..., min_length=1, description="Movie title")
    description: str = Field("", description="Synopsis")
    genre: str = Field(NOT_AVAILABLE, description="Comma separated genre names")
    rating: float = Field(0, ge=0, le=10, description="Average rating out of 10")
    duration: str = Field(NOT_AVAILABLE, description="Runtime, e.g. '120 min'")
    poster_url: str = Field("", description="Poster image url")
    trailer_url: str = Field("", description="YouTube trailer url")
    release_date: Optional[datetime] = Field(None, description="Release date")
    language: str = Field("en", description="2-letter language code")
    tags: List[str] = Field(default_factory=list)
    is_featured: bool = False
    status: str = Field(STATUS_NOW_SHOWING, description="'Now Showing' or 'Coming Soon'")
    cast: List[CastMember] = Field(default_factory=list)
    theater_ids: List[str] = Field(default_factory=list, description="Linked theater ids")
    embedded_theaters: List[EmbeddedTheater] = Field(default_factory=list)

    @field_validator("release_date", mode="before")
    @classmethod
    def _parse_release_date(cls, v):
        return coerce_date_string(v)

    @field_validator("release_date")
    @classmethod
    def _naive_release_date(cls, v):
        return to_naive_utc(v)


class Movie(MovieCreate):
    id: str = Field(..., description="Movie identifier")


class MovieDetail(Movie):
    """Single movie view: embedded theaters are also exposed as `theaters`"""

    theaters: List[EmbeddedTheater] = Field(default_factory=list)


class MovieListResponse(BaseModel):
    count: int = Field(..., description="Movies in this page")
    total: int = Field(..., description="Movies matching the filters")
    page: int = Field(..., description="Page returned (1-based)")
    total_pages: int = Field(..., description="ceil(total / limit)")
    movies: List[Movie]


class GenresResponse(BaseModel):
    genres: List[str]


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return None if math.isnan(parsed) else parsed


def _parse_int(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return default


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None or not value.strip():
        return None
    try:
        return to_naive_utc(datetime.fromisoformat(value.strip()))
    except ValueError:
        return None


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


class MovieQuery(BaseModel):
    """
    Filters, sort and pagination for the movie list.

    All filters are optional and combine with AND. `reference_date` is "today"
    for the upcoming / released split.
    """

    is_upcoming: Optional[bool] = None
    genre: Optional[str] = None
    min_rating: Optional[float] = None
    language: Optional[str] = None
    released_after: Optional[datetime] = None
    location: Optional[str] = None
    title: Optional[str] = None
    sort_by: Optional[Literal["rating", "release_date"]] = None
    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    reference_date: date = Field(default_factory=date.today)

    @property
    def today_start(self) -> datetime:
        return datetime.combine(self.reference_date, time.min)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit)

    @classmethod
    def from_params(
        cls,
        is_upcoming: Optional[str] = None,
        genre: Optional[str] = None,
        min_rating: Optional[str] = None,
        language: Optional[str] = None,
        released_after: Optional[str] = None,
        location: Optional[str] = None,
        title: Optional[str] = None,
        sort_by: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        reference_date: Optional[date] = None,
    ) -> "MovieQuery":
        """
        Build a query from raw query-string values.

        Values that do not parse are ignored rather than rejected, page is
        clamped to 1..MAX_PAGE and limit to 1..MAX_PAGE_SIZE.
        """
        sort = None
        if sort_by == "rating":
            sort = "rating"
        elif sort_by in ("releaseDate", "release_date"):
            sort = "release_date"

        params = dict(
            is_upcoming=_parse_bool(is_upcoming),
            genre=_clean(genre),
            min_rating=_parse_float(min_rating),
            language=_clean(language),
            released_after=_parse_datetime(released_after),
            location=_clean(location),
            title=_clean(title),
            sort_by=sort,
            page=min(max(_parse_int(page, 1), 1), MAX_PAGE),
            limit=min(max(_parse_int(limit, DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE),
        )
        if reference_date is not None:
            params["reference_date"] = reference_date
        return cls(**params)
