"""
TMDB Router - Movie lookups used to pre-fill the admin movie form
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from requests.exceptions import RequestException

from showsnap.adapters.tmdb.tmdb import TMDB_API
from showsnap.preprocessing.movie_documents import build_movie_draft
from showsnap.utils.text_cleaning import clean_search_query
from api.schemas.tmdb import TmdbMovieDraft, TmdbSearchResponse
from api.dependencies import get_tmdb_api

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/search", response_model=TmdbSearchResponse)
def search_movies(
    query: str = Query("", description="Movie title; anything after the first ':' is ignored"),
    tmdb_api: TMDB_API = Depends(get_tmdb_api)
) -> TmdbSearchResponse:
    """Search TMDB, trying each supported language until one has results."""
    cleaned = clean_search_query(query)
    if not cleaned:
        raise HTTPException(status_code=400, detail="Query is required")

    try:
        results, language = tmdb_api.search_with_language_fallback(cleaned)
    except Exception as e:
        logger.error(f"TMDB search failed for '{cleaned}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to search TMDB")

    if not results:
        raise HTTPException(status_code=404, detail="Movie not found in supported languages")

    logger.info(f"TMDB search '{cleaned}': {len(results)} results ({language})")
    return TmdbSearchResponse(results=results)


@router.get("/movie/{tmdb_id}", response_model=TmdbMovieDraft)
def get_movie_draft(tmdb_id: int, tmdb_api: TMDB_API = Depends(get_tmdb_api)) -> TmdbMovieDraft:
    """Details, credits and videos of a TMDB movie as a movie form draft."""
    try:
        details = tmdb_api.get_movie_details(tmdb_id)
        if details is None:
            raise HTTPException(status_code=404, detail="Movie not found on TMDB")
        credits = tmdb_api.get_movie_credits(tmdb_id)
        videos = tmdb_api.get_movie_videos(tmdb_id)

        return TmdbMovieDraft.model_validate(
            build_movie_draft(details, credits, videos, tmdb_api.image_url)
        )
    except HTTPException:
        raise
    except RequestException as e:
        logger.error(f"TMDB lookup failed for {tmdb_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movie details from TMDB")
    except Exception as e:
        logger.error(f"Movie draft failed for {tmdb_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to build movie draft")
