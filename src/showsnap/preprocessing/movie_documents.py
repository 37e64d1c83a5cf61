"""
Turn TMDB payloads into movie documents.

Everything here is pure: TMDB responses (or None when a call produced nothing)
go in, plain dicts ready for the repository come out.
"""
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from showsnap.constants import (
    BACKEND_SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
    MAX_CAST_MEMBERS,
    NOT_AVAILABLE,
    POSTER_SIZE,
    PROFILE_SIZE,
    STATUS_COMING_SOON,
    STATUS_NOW_SHOWING,
    YOUTUBE_WATCH_URL,
)

ImageUrlBuilder = Callable[[str, Optional[str]], str]

_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def parse_release_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a TMDB 'YYYY-MM-DD' release date, None when absent or malformed."""
    if not value or not _ISO_DATE.match(value):
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        return None


def format_duration(runtime: Optional[int], missing: str = NOT_AVAILABLE) -> str:
    return f"{runtime} min" if runtime else missing


def genre_names(genre_ids: Optional[List[int]], genre_list: List[Dict[str, Any]]) -> str:
    """Map TMDB genre ids to a comma separated list of names ('N/A' when nothing maps)."""
    by_id = {g.get('id'): g.get('name') for g in genre_list}
    names = [by_id.get(gid) for gid in (genre_ids or [])]
    names = [n for n in names if n]
    return ', '.join(names) if names else NOT_AVAILABLE


def movie_status(release_date: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return STATUS_COMING_SOON if release_date > now else STATUS_NOW_SHOWING


def build_cast(credits: Optional[Dict[str, Any]], image_url: ImageUrlBuilder) -> List[Dict[str, str]]:
    cast = (credits or {}).get('cast') or []
    return [
        {
            'name': actor.get('name') or '',
            'role': actor.get('character') or '',
            'photo_url': image_url(PROFILE_SIZE, actor.get('profile_path')),
        }
        for actor in cast[:MAX_CAST_MEMBERS]
    ]


def first_trailer_key(videos: Optional[Dict[str, Any]]) -> Optional[str]:
    """First YouTube trailer or teaser, in TMDB order."""
    for video in (videos or {}).get('results') or []:
        if video.get('type') in ('Trailer', 'Teaser') and video.get('site') == 'YouTube':
            return video.get('key')
    return None


def best_trailer_key(videos: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Pick the most relevant YouTube video:
    an official trailer, then any trailer, then a teaser or clip.
    """
    results = [v for v in (videos or {}).get('results') or [] if v.get('site') == 'YouTube']
    preferences = (
        lambda v: v.get('type') == 'Trailer' and v.get('official'),
        lambda v: v.get('type') == 'Trailer',
        lambda v: v.get('type') in ('Teaser', 'Clip'),
    )
    for matches in preferences:
        for video in results:
            if matches(video):
                return video.get('key')
    return None


def trailer_url(key: Optional[str]) -> str:
    return f"{YOUTUBE_WATCH_URL}{key}" if key else ''


def build_movie_document(
    result: Dict[str, Any],
    language: str,
    details: Optional[Dict[str, Any]],
    credits: Optional[Dict[str, Any]],
    videos: Optional[Dict[str, Any]],
    genre_list: List[Dict[str, Any]],
    image_url: ImageUrlBuilder,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build a movie document from a TMDB search hit and its detail calls.

    Title, overview, rating, poster and genres come from the search hit; runtime
    and release date come from the details call. A missing release date falls
    back to `now`, which also drives the Now Showing / Coming Soon status.
    """
    now = now or datetime.now()
    details = details or {}
    release_date = parse_release_date(details.get('release_date')) or now

    return {
        'title': result.get('title'),
        'description': result.get('overview') or 'No description available.',
        'genre': genre_names(result.get('genre_ids'), genre_list),
        'rating': result.get('vote_average') or 0,
        'duration': format_duration(details.get('runtime')),
        'poster_url': image_url(POSTER_SIZE, result.get('poster_path')),
        'trailer_url': trailer_url(first_trailer_key(videos)),
        'release_date': release_date,
        'language': language,
        'tags': [],
        'is_featured': False,
        'status': movie_status(release_date, now),
        'cast': build_cast(credits, image_url),
        'theater_ids': [],
        'embedded_theaters': [],
    }


def build_movie_draft(
    details: Dict[str, Any],
    credits: Optional[Dict[str, Any]],
    videos: Optional[Dict[str, Any]],
    image_url: ImageUrlBuilder,
) -> Dict[str, Any]:
    """Movie form pre-fill for the admin panel, from a TMDB movie id lookup."""
    genres = [g.get('name') for g in details.get('genres') or [] if g.get('name')]
    release_date = details.get('release_date') or ''
    original_language = details.get('original_language')

    return {
        'title': details.get('title') or '',
        'description': details.get('overview') or '',
        'genre': ', '.join(genres),
        'rating': details.get('vote_average') or 0,
        'duration': format_duration(details.get('runtime') or 0, missing='0 min'),
        'poster_url': image_url(POSTER_SIZE, details.get('poster_path')),
        'trailer_url': trailer_url(best_trailer_key(videos)),
        'release_date': release_date if _ISO_DATE.match(release_date) else '',
        'language': original_language if original_language in BACKEND_SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE,
        'cast': build_cast(credits, image_url),
    }
