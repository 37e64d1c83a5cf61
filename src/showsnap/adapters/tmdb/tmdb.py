# Folder in charge of TMDB API interactions
from showsnap.adapters.tmdb.client import TMDB_APIClient
from showsnap.constants import SUPPORTED_TMDB_LANGUAGES, BACKEND_SUPPORTED_LANGUAGES, TMDB_SEARCH_LANGUAGES
from requests.exceptions import HTTPError, RequestException
from typing import Any, Dict, List, Optional, Tuple
import logging


logger = logging.getLogger(__name__)

class TMDB_API():
    """Wrapper class for TMDB API interactions"""
    def __init__(self, client: Optional[TMDB_APIClient] = None):
        self._client: TMDB_APIClient = client or TMDB_APIClient()

    def image_url(self, size: str, path: Optional[str]) -> str:
        return self._client.image_url(size, path)

    def get_genres(self, language: str = 'en-US') -> List[Dict[str, Any]]:
        """Returns the TMDB movie genre list ({id, name} dicts)"""
        response = self._client.get('genre/movie/list', params={'language': language})
        return response.get('genres', []) if response else []

    def search_movie(self, title: str, language: str = 'en-US') -> Dict[str, Any]:
        """Searches for a movie by title and returns the raw TMDB search payload"""
        return self._client.get('search/movie', params={'query': title, 'language': language})

    def search_movie_in_languages(self, title: str) -> Optional[Tuple[Dict[str, Any], str]]:
        """
        Search a title in every supported TMDB locale, in order.

        Returns the first hit together with the 2-letter language code of the locale
        it was found with, or None when no locale yields a usable result.
        Failed locales are logged and skipped.
        """
        for lang in SUPPORTED_TMDB_LANGUAGES:
            try:
                data = self.search_movie(title, language=lang)
            except RequestException as e:
                logger.warning(f"TMDB search failed for '{title}' [{lang}]: {e}")
                continue

            results = (data or {}).get('results') or []
            if not results:
                continue

            language_code = lang.split('-')[0]
            if language_code in BACKEND_SUPPORTED_LANGUAGES:
                return results[0], language_code
        return None

    def search_with_language_fallback(self, query: str) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """
        Search TMDB trying each backend language until one returns results.

        Returns (results, matched_language); results is empty when nothing matched.
        """
        for lang in TMDB_SEARCH_LANGUAGES:
            try:
                data = self.search_movie(query, language=lang)
            except RequestException as e:
                logger.warning(f"TMDB search failed for {lang}: {e}")
                continue

            results = (data or {}).get('results') or []
            if results:
                logger.info(f"TMDB match found in language: {lang}")
                return results, lang
        return [], None

    def get_movie_details(self, movie_id: int | str, language: Optional[str] = None) -> Dict[str, Any] | None:
        """Fetches full movie details from a given movie_id"""
        params = {'language': language} if language else None
        try:
            return self._client.get(f'movie/{movie_id}', params=params)
        except HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                logger.warning(f"Movie ID {movie_id} not found (404)")
                return None
            raise

    def get_movie_credits(self, movie_id: int | str) -> Dict[str, Any] | None:
        try:
            return self._client.get(f'movie/{movie_id}/credits')
        except HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise

    def get_movie_videos(self, movie_id: int | str, language: Optional[str] = None) -> Dict[str, Any] | None:
        params = {'language': language} if language else None
        try:
            return self._client.get(f'movie/{movie_id}/videos', params=params)
        except HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise
