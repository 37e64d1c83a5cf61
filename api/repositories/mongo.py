"""
Mongo Repository - MongoDB-backed data access implementation

Collections: movies, theaters, bookings, users.
Connection settings come from MongoSettings (MONGO_URI, MONGO_DB_NAME).
"""

import logging
from datetime import date, datetime, time
from typing import Optional, List, Dict, Any, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database

from showsnap.constants import THEATER_STATUS_ACTIVE
from showsnap.settings import MongoSettings, get_settings
from showsnap.utils.text_cleaning import contains_pattern
from api.repositories.base import BaseRepository, Document, is_valid_id
from api.schemas.movies import MovieQuery

logger = logging.getLogger(__name__)


def _icontains(term: str) -> Dict[str, str]:
    return {"$regex": contains_pattern(term), "$options": "i"}


def build_movie_filter(query: MovieQuery) -> Dict[str, Any]:
    """
    Translate a MovieQuery into a MongoDB filter document.

    Every active filter becomes one clause of an $and; no filters gives {}.
    """
    filters: List[Dict[str, Any]] = []

    if query.is_upcoming is True:
        filters.append({"release_date": {"$gt": query.today_start}})
    elif query.is_upcoming is False:
        filters.append({"release_date": {"$lte": query.today_start}})

    if query.released_after is not None:
        filters.append({"release_date": {"$gte": query.released_after}})

    if query.location:
        filters.append({"embedded_theaters.location": _icontains(query.location)})

    if query.genre:
        filters.append({"genre": _icontains(query.genre)})

    if query.min_rating is not None:
        filters.append({"rating": {"$gte": query.min_rating}})

    if query.language:
        filters.append({"language": _icontains(query.language)})

    if query.title:
        filters.append({"$or": [
            {"title": _icontains(query.title)},
            {"description": _icontains(query.title)},
        ]})

    return {"$and": filters} if filters else {}


def build_movie_sort(query: MovieQuery) -> Optional[List[Tuple[str, int]]]:
    """Sort spec for the movie list; _id breaks ties so pages stay stable."""
    if query.sort_by == "rating":
        return [("rating", DESCENDING), ("_id", ASCENDING)]
    if query.sort_by == "release_date":
        return [("release_date", DESCENDING), ("_id", ASCENDING)]
    return None


def _from_mongo(doc: Optional[Document]) -> Optional[Document]:
    if doc is None:
        return None
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


def _to_mongo(doc: Document) -> Document:
    return {k: v for k, v in doc.items() if k != "id"}


class MongoRepository(BaseRepository):
    """Repository implementation using MongoDB through pymongo"""

    def __init__(self, settings: Optional[MongoSettings] = None, client: Optional[MongoClient] = None):
        self.settings = settings or get_settings().mongo
        self.client = client or MongoClient(
            self.settings.uri,
            serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
        )
        self.db: Database = self.client[self.settings.db_name]
        self.movies = self.db["movies"]
        self.theaters = self.db["theaters"]
        self.bookings = self.db["bookings"]
        self.users = self.db["users"]
        logger.info(f"MongoRepository initialized with database: {self.settings.db_name}")

    def ensure_indexes(self) -> None:
        self.users.create_index("email", unique=True)
        self.theaters.create_index("name")
        self.bookings.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        logger.info("Mongo indexes ensured")

    # ---- movies ----

    def query_movies(self, query: MovieQuery) -> Tuple[List[Document], int]:
        mongo_filter = build_movie_filter(query)
        cursor = self.movies.find(mongo_filter)
        sort = build_movie_sort(query)
        if sort:
            cursor = cursor.sort(sort)
        cursor = cursor.skip(query.skip).limit(query.limit)

        movies = [_from_mongo(d) for d in cursor]
        total = self.movies.count_documents(mongo_filter)
        return movies, total

    def list_movies(
        self,
        is_upcoming: Optional[bool] = None,
        reference_date: Optional[date] = None
    ) -> List[Document]:
        mongo_filter: Dict[str, Any] = {}
        if is_upcoming is not None:
            today_start = datetime.combine(reference_date or date.today(), time.min)
            mongo_filter["release_date"] = {"$gt": today_start} if is_upcoming else {"$lte": today_start}
        cursor = self.movies.find(mongo_filter).sort("release_date", DESCENDING)
        return [_from_mongo(d) for d in cursor]

    def get_movie(self, movie_id: str) -> Optional[Document]:
        if not is_valid_id(movie_id):
            return None
        return _from_mongo(self.movies.find_one({"_id": ObjectId(movie_id)}))

    def insert_movie(self, movie: Document) -> str:
        result = self.movies.insert_one(_to_mongo(movie))
        return str(result.inserted_id)

    def insert_movies(self, movies: List[Document]) -> List[str]:
        if not movies:
            return []
        result = self.movies.insert_many([_to_mongo(m) for m in movies])
        return [str(i) for i in result.inserted_ids]

    def update_movie(self, movie_id: str, updates: Document) -> Optional[Document]:
        if not is_valid_id(movie_id):
            return None
        updated = self.movies.find_one_and_update(
            {"_id": ObjectId(movie_id)},
            {"$set": _to_mongo(updates)},
            return_document=ReturnDocument.AFTER,
        )
        return _from_mongo(updated)

    def delete_movie(self, movie_id: str) -> Optional[Document]:
        if not is_valid_id(movie_id):
            return None
        return _from_mongo(self.movies.find_one_and_delete({"_id": ObjectId(movie_id)}))

    def delete_all_movies(self) -> int:
        return self.movies.delete_many({}).deleted_count

    def get_genres(self) -> List[str]:
        return [g for g in self.movies.distinct("genre") if isinstance(g, str) and g.strip()]

    def count_movies(self) -> int:
        return self.movies.count_documents({})

    def set_movie_theaters(
        self,
        movie_id: str,
        theater_ids: List[str],
        embedded_theaters: List[Document]
    ) -> None:
        self.movies.update_one(
            {"_id": ObjectId(movie_id)},
            {"$set": {"theater_ids": theater_ids, "embedded_theaters": embedded_theaters}},
        )

    # ---- theaters ----

    def list_theaters(self, location: Optional[str] = None, limit: Optional[int] = None) -> List[Document]:
        mongo_filter = {"location": _icontains(location)} if location and location.strip() else {}
        cursor = self.theaters.find(mongo_filter).sort("_id", ASCENDING)
        if limit:
            cursor = cursor.limit(limit)
        return [_from_mongo(d) for d in cursor]

    def get_theater(self, theater_id: str) -> Optional[Document]:
        if not is_valid_id(theater_id):
            return None
        return _from_mongo(self.theaters.find_one({"_id": ObjectId(theater_id)}))

    def insert_theater(self, theater: Document) -> str:
        data = {"showtimes": [], "movie_titles": [], **_to_mongo(theater)}
        return str(self.theaters.insert_one(data).inserted_id)

    def upsert_theater(self, name: str, location: str) -> Document:
        theater = self.theaters.find_one_and_update(
            {"name": name},
            {"$set": {
                "location": location,
                "showtimes": [],
                "movie_titles": [],
                "status": THEATER_STATUS_ACTIVE,
            }},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return _from_mongo(theater)

    def reset_theater_links(self) -> int:
        result = self.theaters.update_many({}, {"$set": {"movie_titles": [], "showtimes": []}})
        return result.modified_count

    def add_showtimes(self, theater_id: str, showtimes: List[Document], movie_title: str) -> None:
        self.theaters.update_one(
            {"_id": ObjectId(theater_id)},
            {
                "$push": {"showtimes": {"$each": showtimes}},
                "$addToSet": {"movie_titles": movie_title},
            },
        )

    # ---- seats ----

    def reserve_seats(self, movie_id: str, theater_id: str, showtime_id: str, seats: List[str]) -> bool:
        # The theater copy is the source of truth: the conditional update only
        # matches while none of the seats are blocked.
        result = self.theaters.update_one(
            {
                "_id": ObjectId(theater_id),
                "showtimes": {"$elemMatch": {
                    "showtime_id": showtime_id,
                    "movie_id": movie_id,
                    "blocked_seats": {"$nin": seats},
                }},
            },
            {
                "$push": {"showtimes.$.blocked_seats": {"$each": seats}},
                "$inc": {"showtimes.$.available_seats": -len(seats)},
            },
        )
        if result.modified_count == 0:
            return False

        self.movies.update_one(
            {"_id": ObjectId(movie_id)},
            {
                "$addToSet": {"embedded_theaters.$[].showtimes.$[s].blocked_seats": {"$each": seats}},
                "$inc": {"embedded_theaters.$[].showtimes.$[s].available_seats": -len(seats)},
            },
            array_filters=[{"s.showtime_id": showtime_id}],
        )
        return True

    def release_seats(self, movie_id: str, theater_id: str, showtime_id: str, seats: List[str]) -> None:
        self.theaters.update_one(
            {"_id": ObjectId(theater_id), "showtimes": {"$elemMatch": {"showtime_id": showtime_id}}},
            {
                "$pullAll": {"showtimes.$.blocked_seats": seats},
                "$inc": {"showtimes.$.available_seats": len(seats)},
            },
        )
        self.movies.update_one(
            {"_id": ObjectId(movie_id)},
            {
                "$pullAll": {"embedded_theaters.$[].showtimes.$[s].blocked_seats": seats},
                "$inc": {"embedded_theaters.$[].showtimes.$[s].available_seats": len(seats)},
            },
            array_filters=[{"s.showtime_id": showtime_id}],
        )

    # ---- bookings ----

    def insert_booking(self, booking: Document) -> str:
        return str(self.bookings.insert_one(_to_mongo(booking)).inserted_id)

    def get_booking(self, booking_id: str) -> Optional[Document]:
        if not is_valid_id(booking_id):
            return None
        return _from_mongo(self.bookings.find_one({"_id": ObjectId(booking_id)}))

    def list_bookings(
        self,
        user_id: Optional[str] = None,
        movie_id: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[List[Document], int]:
        mongo_filter: Dict[str, Any] = {}
        if user_id:
            mongo_filter["user_id"] = user_id
        if movie_id:
            mongo_filter["movie_id"] = movie_id

        cursor = self.bookings.find(mongo_filter).sort([("created_at", DESCENDING), ("_id", DESCENDING)]).skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [_from_mongo(d) for d in cursor], self.bookings.count_documents(mongo_filter)

    def update_booking(self, booking_id: str, updates: Document) -> Optional[Document]:
        if not is_valid_id(booking_id):
            return None
        updated = self.bookings.find_one_and_update(
            {"_id": ObjectId(booking_id)},
            {"$set": _to_mongo(updates)},
            return_document=ReturnDocument.AFTER,
        )
        return _from_mongo(updated)

    def count_bookings(self) -> int:
        return self.bookings.count_documents({})

    # ---- users ----

    def insert_user(self, user: Document) -> str:
        return str(self.users.insert_one(_to_mongo(user)).inserted_id)

    def get_user(self, user_id: str) -> Optional[Document]:
        if not is_valid_id(user_id):
            return None
        return _from_mongo(self.users.find_one({"_id": ObjectId(user_id)}))

    def get_user_by_email(self, email: str) -> Optional[Document]:
        return _from_mongo(self.users.find_one({"email": email}))

    def list_users(self, skip: int = 0, limit: Optional[int] = None) -> Tuple[List[Document], int]:
        cursor = self.users.find({}).sort("_id", ASCENDING).skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [_from_mongo(d) for d in cursor], self.users.count_documents({})

    def count_users(self) -> int:
        return self.users.count_documents({})

    # ---- lifecycle ----

    def ping(self) -> bool:
        self.client.admin.command("ping")
        return True

    def close(self) -> None:
        logger.info("Closing MongoDB connection")
        self.client.close()
