"""
TMDB API Schemas - Responses of the TMDB proxy endpoints
"""

from typing import Any, Dict, List
from pydantic import BaseModel, Field

from api.schemas.movies import CastMember


class TmdbSearchResponse(BaseModel):
    results: List[Dict[str, Any]] = Field(..., description="Raw TMDB search results")


class TmdbMovieDraft(BaseModel):
    """Pre-filled movie form built from a TMDB movie id"""

    title: str
    description: str
    genre: str
    rating: float
    duration: str
    poster_url: str
    trailer_url: str
    release_date: str = Field(..., description="YYYY-MM-DD or empty")
    language: str
    cast: List[CastMember]
