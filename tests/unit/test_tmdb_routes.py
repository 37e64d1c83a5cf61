"""
API tests for the TMDB proxy endpoints, served by a fake TMDB API.
"""
from api.dependencies import AppState, get_tmdb_api
from api.main import app


def test_search_cuts_query_at_colon(client, fake_tmdb):
    fake_tmdb.search_hits["Dune"] = ({"id": 693134, "title": "Dune: Part Two"}, "en")

    resp = client.get("/api/tmdb/search", params={"query": " Dune: Part Two "})
    assert resp.status_code == 200
    assert resp.json() == {"results": [{"id": 693134, "title": "Dune: Part Two"}]}
    assert fake_tmdb.calls == [("search_fallback", "Dune")]


def test_search_requires_query(client):
    assert client.get("/api/tmdb/search", params={"query": ":subtitle"}).status_code == 400
    assert client.get("/api/tmdb/search").status_code == 400


def test_search_not_found(client):
    assert client.get("/api/tmdb/search", params={"query": "zzz"}).status_code == 404


def test_movie_draft(client, fake_tmdb):
    fake_tmdb.details[27205] = {
        "title": "Inception",
        "overview": "Dreams within dreams.",
        "genres": [{"id": 28, "name": "Action"}],
        "vote_average": 8.4,
        "runtime": 148,
        "poster_path": "/inception.jpg",
        "release_date": "2010-07-16",
        "original_language": "en",
    }
    fake_tmdb.credits[27205] = {"cast": [{"name": "Leonardo DiCaprio", "character": "Cobb", "profile_path": "/leo.jpg"}]}
    fake_tmdb.videos[27205] = {"results": [{"key": "YoHD9XEInc0", "site": "YouTube", "type": "Trailer", "official": True}]}

    body = client.get("/api/tmdb/movie/27205").json()
    assert body["title"] == "Inception"
    assert body["duration"] == "148 min"
    assert body["poster_url"] == "https://img.test/w500/inception.jpg"
    assert body["trailer_url"] == "https://www.youtube.com/watch?v=YoHD9XEInc0"
    assert body["release_date"] == "2010-07-16"
    assert body["cast"] == [{"name": "Leonardo DiCaprio", "role": "Cobb", "photo_url": "https://img.test/w185/leo.jpg"}]


def test_movie_draft_not_found(client):
    assert client.get("/api/tmdb/movie/1").status_code == 404


def test_tmdb_not_configured(client):
    state = AppState()

    def unconfigured():
        return get_tmdb_api(state)

    app.dependency_overrides[get_tmdb_api] = unconfigured
    resp = client.get("/api/tmdb/search", params={"query": "Dune"})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "TMDB API key not configured"
