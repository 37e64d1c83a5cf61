"""
API tests for movies, theaters, users and health endpoints.
"""
import asyncio

from bson import ObjectId
from fastapi.routing import APIRoute
from pymongo.errors import DuplicateKeyError

from api.dependencies import AppState, get_app_state
from api.main import app
from conftest import as_user


class TestMovieList:

    def test_pagination_envelope(self, client, catalog):
        resp = client.get("/api/movies", params={"limit": 3, "sort_by": "rating"})
        assert resp.status_code == 200

        body = resp.json()
        assert body["count"] == 3
        assert body["total"] == 4
        assert body["page"] == 1
        assert body["total_pages"] == 2
        assert [m["title"] for m in body["movies"]] == ["Inception", "Dune: Part Two", "Kantara"]

    def test_filters_combine(self, client, catalog):
        resp = client.get("/api/movies", params={"genre": "action", "min_rating": "8", "is_upcoming": "false"})
        assert [m["title"] for m in resp.json()["movies"]] == ["Inception"]

    def test_invalid_params_are_ignored(self, client, catalog):
        resp = client.get("/api/movies", params={"min_rating": "high", "page": "zero", "limit": "1000"})
        assert resp.status_code == 200
        assert resp.json()["total"] == 4
        assert resp.json()["page"] == 1

    def test_upcoming(self, client, catalog):
        body = client.get("/api/movies", params={"is_upcoming": "true"}).json()
        assert [m["title"] for m in body["movies"]] == ["Avatar: Fire and Ash"]

    def test_empty_catalog(self, client):
        body = client.get("/api/movies").json()
        assert body == {"count": 0, "total": 0, "page": 1, "total_pages": 0, "movies": []}


class TestMovieDetail:

    def test_detail_exposes_theaters(self, client, catalog):
        movie_id = catalog["movie_ids"]["Inception"]
        body = client.get(f"/api/movies/{movie_id}").json()

        assert body["id"] == movie_id
        assert [t["location"] for t in body["theaters"]] == ["Mumbai", "Pune"]
        assert body["theaters"] == body["embedded_theaters"]
        assert body["theaters"][0]["showtimes"][0]["start_time"] == "2025-06-15T10:00:00"

    def test_malformed_id(self, client):
        assert client.get("/api/movies/not-an-id").status_code == 400

    def test_missing_movie(self, client):
        assert client.get(f"/api/movies/{ObjectId()}").status_code == 404

    def test_genres(self, client, catalog):
        body = client.get("/api/movies/genres").json()
        assert body["genres"] == sorted(["Action, Science Fiction", "Science Fiction, Adventure", "Action, Drama", "Adventure"])

    def test_create_movie(self, client, repo):
        resp = client.post("/api/movies", json={"title": "Jawan", "genre": "Action", "release_date": "2023-09-07"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["release_date"] == "2023-09-07T00:00:00"
        assert repo.get_movie(body["id"])["title"] == "Jawan"

    def test_create_movie_requires_title(self, client):
        assert client.post("/api/movies", json={"genre": "Action"}).status_code == 422


class TestTheaters:

    def test_list_and_filter(self, client, catalog):
        assert client.get("/api/theaters").json()["count"] == 3
        body = client.get("/api/theaters", params={"location": "pune"}).json()
        assert [t["name"] for t in body["theaters"]] == ["INOX Amanora"]

    def test_showtimes_filtered_by_movie(self, client, catalog):
        theater_id = catalog["theaters"][1]["id"]
        movie_id = catalog["movie_ids"]["Kantara"]

        body = client.get(f"/api/theaters/{theater_id}/showtimes", params={"movie_id": movie_id}).json()
        assert body["count"] == 4
        assert all(s["movie_id"] == movie_id for s in body["showtimes"])

        assert client.get(f"/api/theaters/{theater_id}/showtimes").json()["count"] == 16

    def test_create_theater(self, client):
        resp = client.post("/api/theaters", json={"name": "Miraj Cinemas", "location": "Panvel"})
        assert resp.status_code == 201
        assert resp.json()["status"] == "Active"
        assert resp.json()["showtimes"] == []

    def test_unknown_theater(self, client):
        assert client.get("/api/theaters/xyz").status_code == 400
        assert client.get(f"/api/theaters/{ObjectId()}").status_code == 404


class TestUsers:

    def test_register_and_me(self, client):
        resp = client.post("/api/users", json={"name": "Meera", "email": "Meera@Example.com"})
        assert resp.status_code == 201
        user = resp.json()
        assert user["email"] == "meera@example.com"
        assert user["role"] == "user"

        me = client.get("/api/users/me", headers=as_user(user["id"]))
        assert me.json()["id"] == user["id"]

    def test_duplicate_email(self, client, users):
        resp = client.post("/api/users", json={"name": "Asha 2", "email": "asha@example.com"})
        assert resp.status_code == 409

    def test_concurrent_duplicate_email(self, client, repo, monkeypatch):
        def insert_user(user):
            raise DuplicateKeyError("E11000 duplicate key error collection: users index: email_1")

        monkeypatch.setattr(repo, "insert_user", insert_user)
        resp = client.post("/api/users", json={"name": "Asha", "email": "asha@example.com"})
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Email already registered"

    def test_invalid_email(self, client):
        assert client.post("/api/users", json={"name": "X", "email": "not-an-email"}).status_code == 422

    def test_unknown_caller(self, client):
        assert client.get("/api/users/me").status_code == 401
        assert client.get("/api/users/me", headers=as_user(str(ObjectId()))).status_code == 401

    def test_get_user(self, client, users):
        assert client.get(f"/api/users/{users['user']}").json()["name"] == "Asha"
        assert client.get(f"/api/users/{ObjectId()}").status_code == 404

    def test_get_user_storage_failure(self, client, repo, users, monkeypatch):
        def get_user(user_id):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(repo, "get_user", get_user)
        resp = client.get(f"/api/users/{users['user']}")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to fetch user"


class TestHealth:

    def test_root(self, client):
        body = client.get("/").json()
        assert body["status"] == "running"
        assert body["health"] == "/api/health/ready"

    def test_ready(self, client, repo):
        state = AppState()
        state.repository = repo
        state._initialized = True
        app.dependency_overrides[get_app_state] = lambda: state

        body = client.get("/api/health/ready").json()
        assert body["ready"] is True
        assert body["details"]["storage_reachable"] is True

    def test_not_ready(self, client):
        app.dependency_overrides[get_app_state] = lambda: AppState()
        assert client.get("/api/health/ready").json()["ready"] is False


def test_api_handlers_are_sync():
    # FastAPI runs plain def handlers in its threadpool, off the event loop
    handlers = [r for r in app.routes if isinstance(r, APIRoute) and r.path.startswith("/api/")]
    assert handlers
    assert [r.path for r in handlers if asyncio.iscoroutinefunction(r.endpoint)] == []
