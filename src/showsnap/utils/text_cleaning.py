import re
from typing import Optional


def clean_search_query(raw: Optional[str]) -> str:
    """
    Keep only the main title of a search query.

    Subtitles after a colon confuse the TMDB search in non-English locales, so
    'Dune: Part Two' is searched as 'Dune'.

    Example:
        "Mission: Impossible " -> "Mission"
        "  " -> ""
    """
    if not raw:
        return ""
    return raw.split(":", 1)[0].strip()


def contains_pattern(term: str) -> str:
    """Regex matching `term` literally anywhere in a string."""
    return re.escape(term.strip())
