"""
Admin API Schemas - Requests and responses of the admin panel
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator

from api.schemas.bookings import Booking
from api.schemas.movies import CastMember, Movie, MovieCreate, coerce_date_string, to_naive_utc
from api.schemas.users import User, UserSummary

NON_NULLABLE_MOVIE_FIELDS = (
    "title", "description", "genre", "rating", "duration", "poster_url", "trailer_url",
    "language", "tags", "is_featured", "status", "cast",
)


class TheaterRef(BaseModel):
    id: str


class AdminMovieCreate(BaseModel):
    """
    Movie form submitted by the admin panel.

    title, genre, poster_url, release_date and language are required; they are
    optional here so that missing ones can be reported together.
    """

    title: Optional[str] = None
    description: str = ""
    genre: Optional[str] = None
    rating: float = Field(0, ge=0, le=10)
    duration: str = "N/A"
    poster_url: Optional[str] = None
    trailer_url: str = ""
    release_date: Optional[datetime] = None
    language: Optional[str] = None
    cast: List[CastMember] = Field(default_factory=list)
    theaters: List[Union[str, TheaterRef]] = Field(default_factory=list, description="Theater ids to link")

    @field_validator("release_date", mode="before")
    @classmethod
    def _parse_release_date(cls, v):
        return coerce_date_string(v)

    @field_validator("release_date")
    @classmethod
    def _naive_release_date(cls, v):
        return to_naive_utc(v)

    def missing_fields(self) -> List[str]:
        required = ("title", "genre", "poster_url", "release_date", "language")
        return [name for name in required if not getattr(self, name)]

    def theater_ids(self) -> List[str]:
        return [t if isinstance(t, str) else t.id for t in self.theaters]


class MovieUpdate(BaseModel):
    """
    Partial movie update, only the fields sent are applied.

    Only release_date may be sent as null; null for any other field is a
    validation error.
    """

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    genre: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=10)
    duration: Optional[str] = None
    poster_url: Optional[str] = None
    trailer_url: Optional[str] = None
    release_date: Optional[datetime] = None
    language: Optional[str] = None
    tags: Optional[List[str]] = None
    is_featured: Optional[bool] = None
    status: Optional[str] = None
    cast: Optional[List[CastMember]] = None

    @field_validator("release_date", mode="before")
    @classmethod
    def _parse_release_date(cls, v):
        return coerce_date_string(v)

    @field_validator(*NON_NULLABLE_MOVIE_FIELDS)
    @classmethod
    def _reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("release_date")
    @classmethod
    def _naive_release_date(cls, v):
        return to_naive_utc(v)

    def to_update(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class MovieMessageResponse(BaseModel):
    message: str
    movie: Movie


class DeletedMovieResponse(BaseModel):
    message: str
    deleted: Movie


class BulkMovieCreate(BaseModel):
    movies: List[MovieCreate] = Field(default_factory=list)


class BulkMovieResponse(BaseModel):
    message: str
    movies: List[Movie]


class AdminMovieList(BaseModel):
    count: int
    movies: List[Movie]


class AdminStats(BaseModel):
    users: int
    bookings: int
    movies: int


class AdminBooking(Booking):
    """Booking with its user and movie populated"""

    user: Optional[UserSummary] = None
    movie: Optional[Movie] = None


class AdminBookingsResponse(BaseModel):
    count: int
    total: int
    page: int
    bookings: List[AdminBooking]


class AdminUsersResponse(BaseModel):
    count: int
    total: int
    page: int
    users: List[User]


class MessageResponse(BaseModel):
    message: str
