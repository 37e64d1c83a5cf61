"""
Shared fixtures: a local repository on tmp_path, a fake TMDB API and an API
client wired to both through dependency overrides.
"""
from datetime import date, datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient

from showsnap.pipelines.theater_linking import link_movie_to_theaters
from api.dependencies import get_repository, get_tmdb_api
from api.main import app
from api.repositories.local import LocalFileRepository

TODAY = date(2025, 6, 15)
UPCOMING_RELEASE = datetime.combine(date.today() + timedelta(days=90), time.min)


class FakeTMDB:
    """Stands in for TMDB_API: canned payloads keyed by title / movie id."""

    def __init__(self, search_hits=None, details=None, credits=None, videos=None, genres=None):
        self.search_hits = search_hits or {}
        self.details = details or {}
        self.credits = credits or {}
        self.videos = videos or {}
        self.genres = genres or []
        self.calls = []

    def image_url(self, size, path):
        return f"https://img.test/{size}{path}" if path else ""

    def get_genres(self, language="en-US"):
        return self.genres

    def search_movie_in_languages(self, title):
        self.calls.append(("search_in_languages", title))
        return self.search_hits.get(title)

    def search_with_language_fallback(self, query):
        self.calls.append(("search_fallback", query))
        hit = self.search_hits.get(query)
        return ([hit[0]], "en") if hit else ([], None)

    def get_movie_details(self, movie_id, language=None):
        return self.details.get(movie_id)

    def get_movie_credits(self, movie_id):
        return self.credits.get(movie_id)

    def get_movie_videos(self, movie_id, language=None):
        return self.videos.get(movie_id)


def make_movie(title, release_date, **extra):
    movie = {
        "title": title,
        "description": "",
        "genre": "Drama",
        "rating": 5.0,
        "duration": "120 min",
        "poster_url": "",
        "trailer_url": "",
        "release_date": release_date,
        "language": "en",
        "tags": [],
        "is_featured": False,
        "status": "Now Showing",
        "cast": [],
        "theater_ids": [],
        "embedded_theaters": [],
    }
    movie.update(extra)
    return movie


@pytest.fixture
def repo(tmp_path):
    return LocalFileRepository(tmp_path)


@pytest.fixture
def catalog(repo):
    """
    Three theaters and four movies, every movie scheduled in the Pune and
    Mumbai theaters for TODAY (no blocked seats).
    """
    theaters = [
        repo.upsert_theater("PVR Phoenix", "Mumbai"),
        repo.upsert_theater("INOX Amanora", "Pune"),
        repo.upsert_theater("Cinepolis Nexus", "Bengaluru"),
    ]
    movies = {
        "Inception": make_movie(
            "Inception", datetime(2010, 7, 16), genre="Action, Science Fiction", rating=8.4,
            description="A thief who steals corporate secrets through dreams",
        ),
        "Dune: Part Two": make_movie(
            "Dune: Part Two", datetime(2024, 3, 1), genre="Science Fiction, Adventure", rating=8.1,
        ),
        "Kantara": make_movie(
            "Kantara", datetime(2022, 9, 30), genre="Action, Drama", rating=7.6, language="kn",
        ),
        "Avatar: Fire and Ash": make_movie(
            "Avatar: Fire and Ash", UPCOMING_RELEASE, genre="Adventure", rating=0.0,
            status="Coming Soon",
        ),
    }
    ids = {}
    for title, movie in movies.items():
        ids[title] = repo.insert_movie(movie)
        link_movie_to_theaters(repo, ids[title], title, theaters[:2], day=TODAY)

    return {"theaters": theaters, "movie_ids": ids}


@pytest.fixture
def users(repo):
    user = {"name": "Asha", "email": "asha@example.com", "role": "user", "created_at": datetime(2025, 1, 1)}
    other = {"name": "Ravi", "email": "ravi@example.com", "role": "user", "created_at": datetime(2025, 1, 2)}
    admin = {"name": "Admin", "email": "admin@example.com", "role": "admin", "created_at": datetime(2025, 1, 3)}
    return {
        "user": repo.insert_user(user),
        "other": repo.insert_user(other),
        "admin": repo.insert_user(admin),
    }


@pytest.fixture
def fake_tmdb():
    return FakeTMDB()


@pytest.fixture
def client(repo, fake_tmdb):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_tmdb_api] = lambda: fake_tmdb
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def as_user(user_id):
    return {"X-User-Id": user_id}
