"""
Booking Service - Seat reservation, cancellation and payment of bookings

Routers translate the errors raised here into HTTP status codes:
BookingNotFoundError -> 404, BookingConflictError -> 409, ValueError -> 400.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from showsnap.preprocessing.showtimes import invalid_seats
from api.repositories.base import BaseRepository, Document, is_valid_id
from api.schemas.bookings import BookingCreate, PaymentRequest

logger = logging.getLogger(__name__)


class BookingNotFoundError(LookupError):
    pass


class BookingConflictError(RuntimeError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def find_showtime(theater: Document, showtime_id: str) -> Optional[Dict[str, Any]]:
    return next(
        (s for s in theater.get("showtimes", []) if s.get("showtime_id") == showtime_id),
        None
    )


def create_booking(
    repo: BaseRepository,
    user: Document,
    request: BookingCreate,
    ticket_price: float,
    now: Optional[datetime] = None
) -> Document:
    """
    Reserve seats on a showtime and record a pending booking.

    The seats are blocked in the theater's showtime and in the movie's embedded
    copy before the booking is written; the booking still needs a payment.
    """
    for name in ("movie_id", "theater_id"):
        if not is_valid_id(getattr(request, name)):
            raise ValueError(f"Invalid {name}")

    movie = repo.get_movie(request.movie_id)
    if movie is None:
        raise BookingNotFoundError("Movie not found")
    theater = repo.get_theater(request.theater_id)
    if theater is None:
        raise BookingNotFoundError("Theater not found")

    showtime = find_showtime(theater, request.showtime_id)
    if showtime is None:
        raise BookingNotFoundError("Showtime not found")
    if showtime.get("movie_id") != request.movie_id:
        raise ValueError("Showtime does not belong to this movie")

    unknown = invalid_seats(request.seats)
    if unknown:
        raise ValueError(f"Invalid seats: {', '.join(unknown)}")

    taken = [s for s in request.seats if s in showtime.get("blocked_seats", [])]
    if taken:
        raise BookingConflictError(f"Seats already booked: {', '.join(taken)}")

    if not repo.reserve_seats(request.movie_id, request.theater_id, request.showtime_id, request.seats):
        # Someone else took one of the seats between the read and the update
        raise BookingConflictError("Seats already booked")

    booking = {
        "user_id": user["id"],
        "movie_id": request.movie_id,
        "theater_id": request.theater_id,
        "showtime_id": request.showtime_id,
        "movie_title": movie.get("title"),
        "theater_name": theater.get("name"),
        "start_time": showtime.get("start_time"),
        "seats": list(request.seats),
        "total_price": len(request.seats) * ticket_price,
        "status": "pending",
        "payment_status": "unpaid",
        "payment": None,
        "created_at": now or _utcnow(),
    }
    booking["id"] = repo.insert_booking(booking)
    logger.info(f"Booking {booking['id']} created: {len(request.seats)} seats for '{movie.get('title')}'")
    return booking


def get_booking_for(repo: BaseRepository, booking_id: str, user: Document) -> Document:
    """A booking visible to `user`: their own, or any booking for admins."""
    if not is_valid_id(booking_id):
        raise ValueError("Invalid booking id")
    booking = repo.get_booking(booking_id)
    if booking is None:
        raise BookingNotFoundError("Booking not found")
    if booking["user_id"] != user["id"] and user.get("role") != "admin":
        raise PermissionError("Not your booking")
    return booking


def list_user_bookings(repo: BaseRepository, user: Document) -> List[Document]:
    bookings, _ = repo.list_bookings(user_id=user["id"])
    return bookings


def cancel_booking(repo: BaseRepository, booking_id: str, user: Document) -> Document:
    """Cancel a booking and give its seats back to the showtime."""
    booking = get_booking_for(repo, booking_id, user)
    if booking.get("status") == "cancelled":
        raise BookingConflictError("Booking already cancelled")

    repo.release_seats(booking["movie_id"], booking["theater_id"], booking["showtime_id"], booking["seats"])
    updated = repo.update_booking(booking_id, {"status": "cancelled"})
    logger.info(f"Booking {booking_id} cancelled, released {len(booking['seats'])} seats")
    return updated


def pay_booking(
    repo: BaseRepository,
    request: PaymentRequest,
    user: Document,
    now: Optional[datetime] = None
) -> Document:
    """
    Record a payment for the full booking amount and confirm the booking.

    No gateway is involved: the payment record is written on the booking.
    """
    booking = get_booking_for(repo, request.booking_id, user)
    if booking.get("status") == "cancelled":
        raise BookingConflictError("Booking is cancelled")
    if booking.get("payment_status") == "paid":
        raise BookingConflictError("Booking already paid")

    payment = {
        "payment_id": uuid.uuid4().hex,
        "method": request.method,
        "amount": booking["total_price"],
        "status": "succeeded",
        "paid_at": now or _utcnow(),
    }
    updated = repo.update_booking(
        request.booking_id,
        {"payment": payment, "payment_status": "paid", "status": "confirmed"}
    )
    logger.info(f"Booking {request.booking_id} paid by {request.method} ({payment['amount']})")
    return updated
