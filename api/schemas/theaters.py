"""
Theater API Schemas - Theaters and their own showtime arrays
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from api.schemas.movies import Showtime
from showsnap.constants import THEATER_STATUS_ACTIVE


class TheaterCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Theater name")
    location: str = Field(..., min_length=1, description="City or area")
    status: str = Field(THEATER_STATUS_ACTIVE, description="Theater status")


class Theater(TheaterCreate):
    id: str = Field(..., description="Theater identifier")
    showtimes: List[Showtime] = Field(default_factory=list)
    movie_titles: List[str] = Field(default_factory=list, description="Titles currently scheduled")


class TheaterListResponse(BaseModel):
    count: int
    theaters: List[Theater]


class TheaterShowtimesResponse(BaseModel):
    theater_id: str
    movie_id: Optional[str] = Field(None, description="Filter applied, if any")
    count: int
    showtimes: List[Showtime]
