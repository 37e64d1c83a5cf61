"""
Unit tests for MongoRepository against an in-memory mongomock client.

mongomock has no array_filters support, so the updates of the movie's
embedded showtime copies are checked on a mock collection instead.
"""
from datetime import date, datetime
from unittest.mock import MagicMock

import mongomock
import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from showsnap.settings import MongoSettings
from api.repositories.mongo import MongoRepository
from api.schemas.movies import MovieQuery
from conftest import make_movie


@pytest.fixture
def repo():
    repo = MongoRepository(MongoSettings(db_name="showsnap_test"), client=mongomock.MongoClient())
    repo.ensure_indexes()
    return repo


@pytest.fixture
def movies(repo):
    docs = [
        make_movie("Inception", datetime(2010, 7, 16), genre="Action, Science Fiction", rating=8.4),
        make_movie("Dune: Part Two", datetime(2024, 3, 1), genre="Science Fiction, Adventure", rating=8.1),
        make_movie("Kantara", datetime(2022, 9, 30), genre="Action, Drama", rating=7.6, language="kn"),
        make_movie("Jawan", datetime(2023, 9, 7), genre="Action, Thriller", rating=7.0, language="hi"),
        make_movie("Avatar: Fire and Ash", datetime(2025, 12, 19), genre="Adventure", rating=0.0),
    ]
    return dict(zip([d["title"] for d in docs], repo.insert_movies(docs)))


def titles(docs):
    return [d["title"] for d in docs]


class TestQueryMovies:

    def test_page_and_total(self, repo, movies):
        query = MovieQuery.from_params(sort_by="rating", page="2", limit="2")
        page, total = repo.query_movies(query)

        assert titles(page) == ["Kantara", "Jawan"]
        assert total == 5
        assert all("_id" not in m and m["id"] in movies.values() for m in page)

    def test_filters_and_count_agree(self, repo, movies):
        query = MovieQuery.from_params(genre="science", sort_by="release_date", limit="1")
        page, total = repo.query_movies(query)

        assert titles(page) == ["Dune: Part Two"]
        assert total == 2

    def test_upcoming_split(self, repo, movies):
        query = MovieQuery.from_params(is_upcoming="true", reference_date=date(2025, 6, 15))
        page, total = repo.query_movies(query)
        assert titles(page) == ["Avatar: Fire and Ash"]
        assert total == 1

    def test_list_movies_newest_first(self, repo, movies):
        released = repo.list_movies(is_upcoming=False, reference_date=date(2025, 6, 15))
        assert titles(released) == ["Dune: Part Two", "Jawan", "Kantara", "Inception"]

    def test_update_get_delete(self, repo, movies):
        movie_id = movies["Jawan"]
        assert repo.update_movie(movie_id, {"rating": 7.5, "id": "ignored"})["rating"] == 7.5
        assert repo.get_movie(movie_id)["id"] == movie_id

        assert repo.delete_movie(movie_id)["title"] == "Jawan"
        assert repo.get_movie(movie_id) is None
        assert repo.count_movies() == 4
        assert repo.get_movie("not-an-id") is None


class TestTheaters:

    def test_upsert_is_keyed_on_name_and_resets(self, repo):
        first = repo.upsert_theater("PVR Phoenix", "Mumbai")
        assert first["name"] == "PVR Phoenix"
        assert first["showtimes"] == []
        assert first["status"] == "Active"

        repo.add_showtimes(first["id"], [{"showtime_id": "s1"}], "Inception")
        second = repo.upsert_theater("PVR Phoenix", "Mumbai West")

        assert second["id"] == first["id"]
        assert second["location"] == "Mumbai West"
        assert second["showtimes"] == []
        assert second["movie_titles"] == []
        assert len(repo.list_theaters()) == 1

    def test_add_showtimes_pushes_and_keeps_titles_unique(self, repo):
        theater = repo.upsert_theater("INOX Amanora", "Pune")
        repo.add_showtimes(theater["id"], [{"showtime_id": "s1"}, {"showtime_id": "s2"}], "Inception")
        repo.add_showtimes(theater["id"], [{"showtime_id": "s3"}], "Inception")
        repo.add_showtimes(theater["id"], [{"showtime_id": "s4"}], "Kantara")

        stored = repo.get_theater(theater["id"])
        assert [s["showtime_id"] for s in stored["showtimes"]] == ["s1", "s2", "s3", "s4"]
        assert stored["movie_titles"] == ["Inception", "Kantara"]

    def test_location_filter_and_reset(self, repo):
        repo.upsert_theater("PVR Phoenix", "Mumbai")
        pune = repo.upsert_theater("INOX Amanora", "Pune")
        repo.add_showtimes(pune["id"], [{"showtime_id": "s1"}], "Inception")

        assert [t["name"] for t in repo.list_theaters(location="PUN")] == ["INOX Amanora"]
        repo.reset_theater_links()
        assert repo.get_theater(pune["id"])["showtimes"] == []


class TestSeats:

    @pytest.fixture
    def show(self, repo):
        movie_id = str(ObjectId())
        theater_id = repo.insert_theater({
            "name": "PVR Phoenix",
            "location": "Mumbai",
            "showtimes": [
                {"showtime_id": "s0", "movie_id": movie_id, "blocked_seats": ["A1"], "available_seats": 23},
                {"showtime_id": "s1", "movie_id": movie_id, "blocked_seats": [], "available_seats": 24},
            ],
        })
        repo.movies = MagicMock()
        return movie_id, theater_id

    def _showtime(self, repo, theater_id, showtime_id):
        return next(s for s in repo.get_theater(theater_id)["showtimes"] if s["showtime_id"] == showtime_id)

    def test_reserve_updates_theater_and_movie_copies(self, repo, show):
        movie_id, theater_id = show
        assert repo.reserve_seats(movie_id, theater_id, "s1", ["A1", "A2"]) is True

        showtime = self._showtime(repo, theater_id, "s1")
        assert showtime["blocked_seats"] == ["A1", "A2"]
        assert showtime["available_seats"] == 22
        assert self._showtime(repo, theater_id, "s0")["blocked_seats"] == ["A1"]

        repo.movies.update_one.assert_called_once_with(
            {"_id": ObjectId(movie_id)},
            {
                "$addToSet": {"embedded_theaters.$[].showtimes.$[s].blocked_seats": {"$each": ["A1", "A2"]}},
                "$inc": {"embedded_theaters.$[].showtimes.$[s].available_seats": -2},
            },
            array_filters=[{"s.showtime_id": "s1"}],
        )

    def test_overlapping_reservation_is_refused(self, repo, show):
        movie_id, theater_id = show
        assert repo.reserve_seats(movie_id, theater_id, "s1", ["B1", "B2"]) is True
        assert repo.reserve_seats(movie_id, theater_id, "s1", ["B2", "B3"]) is False

        showtime = self._showtime(repo, theater_id, "s1")
        assert showtime["blocked_seats"] == ["B1", "B2"]
        assert showtime["available_seats"] == 22
        assert repo.movies.update_one.call_count == 1

    def test_reserve_refuses_other_movie_and_unknown_showtime(self, repo, show):
        movie_id, theater_id = show
        assert repo.reserve_seats(str(ObjectId()), theater_id, "s1", ["C1"]) is False
        assert repo.reserve_seats(movie_id, theater_id, "missing", ["C1"]) is False
        repo.movies.update_one.assert_not_called()

    def test_release_restores_seats(self, repo, show):
        movie_id, theater_id = show
        repo.reserve_seats(movie_id, theater_id, "s1", ["D1", "D2", "D3"])
        repo.movies.reset_mock()

        repo.release_seats(movie_id, theater_id, "s1", ["D1", "D2"])

        showtime = self._showtime(repo, theater_id, "s1")
        assert showtime["blocked_seats"] == ["D3"]
        assert showtime["available_seats"] == 23
        repo.movies.update_one.assert_called_once_with(
            {"_id": ObjectId(movie_id)},
            {
                "$pullAll": {"embedded_theaters.$[].showtimes.$[s].blocked_seats": ["D1", "D2"]},
                "$inc": {"embedded_theaters.$[].showtimes.$[s].available_seats": 2},
            },
            array_filters=[{"s.showtime_id": "s1"}],
        )


class TestBookingsAndUsers:

    def test_bookings_newest_first_with_filters(self, repo):
        repo.insert_booking({"user_id": "u1", "movie_id": "m1", "created_at": datetime(2025, 1, 1)})
        repo.insert_booking({"user_id": "u2", "movie_id": "m1", "created_at": datetime(2025, 1, 3)})
        repo.insert_booking({"user_id": "u1", "movie_id": "m2", "created_at": datetime(2025, 1, 2)})

        bookings, total = repo.list_bookings()
        assert [b["created_at"].day for b in bookings] == [3, 2, 1]
        assert total == 3

        bookings, total = repo.list_bookings(user_id="u1", skip=1, limit=1)
        assert [b["movie_id"] for b in bookings] == ["m1"]
        assert total == 2

    def test_update_booking(self, repo):
        booking_id = repo.insert_booking({"user_id": "u1", "status": "pending"})
        assert repo.update_booking(booking_id, {"status": "cancelled"})["status"] == "cancelled"
        assert repo.count_bookings() == 1

    def test_email_is_unique(self, repo):
        user_id = repo.insert_user({"name": "Asha", "email": "asha@example.com", "role": "user"})
        assert repo.get_user_by_email("asha@example.com")["id"] == user_id
        assert repo.get_user(user_id)["name"] == "Asha"

        with pytest.raises(DuplicateKeyError):
            repo.insert_user({"name": "Asha 2", "email": "asha@example.com", "role": "user"})
        assert repo.count_users() == 1
