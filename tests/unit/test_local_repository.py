"""
Unit tests for the local file repository: movie queries through pandas,
persistence, theater upserts and seat reservations.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from api.repositories.local import LocalFileRepository
from api.schemas.movies import MovieQuery
from conftest import make_movie


def titles(movies):
    return [m["title"] for m in movies]


class TestQueryMovies:

    def test_upcoming_and_released_split(self, repo, catalog):
        upcoming, _ = repo.query_movies(MovieQuery.from_params(is_upcoming="true"))
        released, total = repo.query_movies(MovieQuery.from_params(is_upcoming="false"))

        assert titles(upcoming) == ["Avatar: Fire and Ash"]
        assert total == 3
        assert "Avatar: Fire and Ash" not in titles(released)

    def test_genre_is_case_insensitive_substring(self, repo, catalog):
        movies, total = repo.query_movies(MovieQuery.from_params(genre="science"))
        assert sorted(titles(movies)) == ["Dune: Part Two", "Inception"]
        assert total == 2

    def test_min_rating_and_sort_by_rating(self, repo, catalog):
        movies, _ = repo.query_movies(MovieQuery.from_params(min_rating="7.6", sort_by="rating"))
        assert titles(movies) == ["Inception", "Dune: Part Two", "Kantara"]

    def test_sort_by_release_date_descending(self, repo, catalog):
        movies, _ = repo.query_movies(MovieQuery.from_params(sort_by="releaseDate"))
        assert titles(movies) == ["Avatar: Fire and Ash", "Dune: Part Two", "Kantara", "Inception"]

    def test_released_after(self, repo, catalog):
        movies, _ = repo.query_movies(MovieQuery.from_params(released_after="2022-01-01", sort_by="release_date"))
        assert titles(movies) == ["Avatar: Fire and Ash", "Dune: Part Two", "Kantara"]

    def test_title_matches_description_too(self, repo, catalog):
        movies, _ = repo.query_movies(MovieQuery.from_params(title="DREAMS"))
        assert titles(movies) == ["Inception"]

    def test_location_matches_embedded_theaters(self, repo, catalog):
        movies, total = repo.query_movies(MovieQuery.from_params(location="pune"))
        assert total == 4

        movies, total = repo.query_movies(MovieQuery.from_params(location="Bengaluru"))
        assert movies == []
        assert total == 0

    def test_language_filter(self, repo, catalog):
        movies, _ = repo.query_movies(MovieQuery.from_params(language="KN"))
        assert titles(movies) == ["Kantara"]

    def test_pagination_keeps_total(self, repo, catalog):
        movies, total = repo.query_movies(MovieQuery.from_params(sort_by="rating", page="2", limit="3"))
        assert titles(movies) == ["Avatar: Fire and Ash"]
        assert total == 4

    def test_missing_release_dates_sort_last(self, repo):
        repo.insert_movie(make_movie("Undated", None))
        repo.insert_movie(make_movie("Dated", datetime(2020, 1, 1)))

        movies, _ = repo.query_movies(MovieQuery.from_params(sort_by="release_date"))
        assert titles(movies) == ["Dated", "Undated"]

    def test_empty_store(self, repo):
        assert repo.query_movies(MovieQuery.from_params()) == ([], 0)


class TestMovieCrud:

    def test_list_movies_newest_first(self, repo, catalog):
        movies = repo.list_movies(is_upcoming=False)
        assert titles(movies) == ["Dune: Part Two", "Kantara", "Inception"]

    def test_genres_are_distinct_and_non_blank(self, repo):
        repo.insert_movies([
            make_movie("A", None, genre="Drama"),
            make_movie("B", None, genre="Drama"),
            make_movie("C", None, genre="  "),
            make_movie("D", None, genre="Action, Drama"),
        ])
        assert repo.get_genres() == ["Action, Drama", "Drama"]

    def test_update_and_delete(self, repo):
        movie_id = repo.insert_movie(make_movie("Old title", None))

        updated = repo.update_movie(movie_id, {"title": "New title"})
        assert updated["title"] == "New title"
        assert updated["id"] == movie_id

        deleted = repo.delete_movie(movie_id)
        assert deleted["title"] == "New title"
        assert repo.get_movie(movie_id) is None
        assert repo.delete_movie(movie_id) is None

    def test_returned_documents_are_copies(self, repo):
        movie_id = repo.insert_movie(make_movie("Copy", None))
        repo.get_movie(movie_id)["title"] = "Changed"
        assert repo.get_movie(movie_id)["title"] == "Copy"


class TestPersistence:

    def test_store_survives_reload(self, tmp_path):
        repo = LocalFileRepository(tmp_path)
        movie_id = repo.insert_movie(make_movie("Persisted", datetime(2024, 1, 1)))
        repo.upsert_theater("PVR", "Pune")

        reloaded = LocalFileRepository(tmp_path)
        assert reloaded.get_movie(movie_id)["title"] == "Persisted"
        assert reloaded.count_movies() == 1
        assert len(reloaded.list_theaters()) == 1

    def test_memory_only_store(self):
        repo = LocalFileRepository()
        assert repo.store_path is None
        repo.insert_movie(make_movie("Ephemeral", None))
        assert repo.count_movies() == 1


class TestTheaters:

    def test_upsert_is_keyed_on_name_and_resets(self, repo):
        first = repo.upsert_theater("PVR", "Pune")
        repo.add_showtimes(first["id"], [{"showtime_id": "s1", "movie_id": "m1"}], "Inception")

        second = repo.upsert_theater("PVR", "Pune West")
        assert second["id"] == first["id"]
        assert second["location"] == "Pune West"
        assert second["showtimes"] == []
        assert second["movie_titles"] == []
        assert second["status"] == "Active"

    def test_add_showtimes_keeps_titles_unique(self, repo):
        theater = repo.upsert_theater("PVR", "Pune")
        repo.add_showtimes(theater["id"], [{"showtime_id": "s1"}], "Inception")
        repo.add_showtimes(theater["id"], [{"showtime_id": "s2"}], "Inception")

        stored = repo.get_theater(theater["id"])
        assert stored["movie_titles"] == ["Inception"]
        assert len(stored["showtimes"]) == 2

    def test_location_filter_and_limit(self, repo, catalog):
        assert [t["name"] for t in repo.list_theaters(location="mum")] == ["PVR Phoenix"]
        assert len(repo.list_theaters(limit=2)) == 2

    def test_reset_theater_links(self, repo, catalog):
        assert repo.reset_theater_links() == 3
        assert all(t["showtimes"] == [] for t in repo.list_theaters())


class TestSeats:

    @pytest.fixture
    def showtime(self, repo, catalog):
        movie_id = catalog["movie_ids"]["Inception"]
        theater = repo.get_theater(catalog["theaters"][0]["id"])
        showtime = next(s for s in theater["showtimes"] if s["movie_id"] == movie_id)
        return movie_id, theater["id"], showtime["showtime_id"]

    def _copies(self, repo, movie_id, theater_id, showtime_id):
        theater_copy = next(s for s in repo.get_theater(theater_id)["showtimes"] if s["showtime_id"] == showtime_id)
        movie_copies = [
            s
            for t in repo.get_movie(movie_id)["embedded_theaters"]
            for s in t["showtimes"]
            if s["showtime_id"] == showtime_id
        ]
        return theater_copy, movie_copies

    def test_reserve_updates_both_copies(self, repo, showtime):
        movie_id, theater_id, showtime_id = showtime
        assert repo.reserve_seats(movie_id, theater_id, showtime_id, ["A1", "A2"]) is True

        theater_copy, movie_copies = self._copies(repo, movie_id, theater_id, showtime_id)
        assert theater_copy["blocked_seats"] == ["A1", "A2"]
        assert theater_copy["available_seats"] == 22
        assert len(movie_copies) == 1
        assert movie_copies[0]["blocked_seats"] == ["A1", "A2"]
        assert movie_copies[0]["available_seats"] == 22

    def test_reserve_refuses_taken_seats(self, repo, showtime):
        movie_id, theater_id, showtime_id = showtime
        assert repo.reserve_seats(movie_id, theater_id, showtime_id, ["B3"]) is True
        assert repo.reserve_seats(movie_id, theater_id, showtime_id, ["B3", "B4"]) is False

        theater_copy, _ = self._copies(repo, movie_id, theater_id, showtime_id)
        assert theater_copy["blocked_seats"] == ["B3"]

    def test_reserve_refuses_other_movie(self, repo, catalog, showtime):
        _, theater_id, showtime_id = showtime
        other_movie = catalog["movie_ids"]["Kantara"]
        assert repo.reserve_seats(other_movie, theater_id, showtime_id, ["A1"]) is False

    def test_release_restores_seats(self, repo, showtime):
        movie_id, theater_id, showtime_id = showtime
        repo.reserve_seats(movie_id, theater_id, showtime_id, ["C1", "C2"])
        repo.release_seats(movie_id, theater_id, showtime_id, ["C1", "C2"])

        theater_copy, movie_copies = self._copies(repo, movie_id, theater_id, showtime_id)
        assert theater_copy["blocked_seats"] == []
        assert theater_copy["available_seats"] == 24
        assert movie_copies[0]["available_seats"] == 24

    def test_concurrent_reservations_of_one_seat(self, repo, showtime):
        movie_id, theater_id, showtime_id = showtime
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(
                lambda _: repo.reserve_seats(movie_id, theater_id, showtime_id, ["D4"]), range(16)
            ))

        assert results.count(True) == 1
        theater_copy, movie_copies = self._copies(repo, movie_id, theater_id, showtime_id)
        assert theater_copy["blocked_seats"] == ["D4"]
        assert movie_copies[0]["available_seats"] == 23


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

    def test_user_lookup_by_email(self, repo):
        user_id = repo.insert_user({"name": "Asha", "email": "asha@example.com", "role": "user"})
        assert repo.get_user_by_email("asha@example.com")["id"] == user_id
        assert repo.get_user_by_email("nobody@example.com") is None
        assert repo.count_users() == 1
