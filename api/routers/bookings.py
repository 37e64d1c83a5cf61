"""
Bookings Router - Reserve, list and cancel seat bookings
"""

import logging
from fastapi import APIRouter, Depends, HTTPException

from showsnap.settings import get_settings
from api.schemas.bookings import Booking, BookingCreate, BookingListResponse
from api.dependencies import get_current_user, get_repository
from api.repositories.base import BaseRepository
from api.services import booking_service
from api.services.booking_service import BookingConflictError, BookingNotFoundError

router = APIRouter()
logger = logging.getLogger(__name__)


def booking_http_error(e: Exception) -> HTTPException:
    """Map booking service errors to HTTP errors."""
    if isinstance(e, BookingNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, BookingConflictError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, PermissionError):
        return HTTPException(status_code=403, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


@router.post("", response_model=Booking, status_code=201)
def create_booking(
    request: BookingCreate,
    user: dict = Depends(get_current_user),
    repo: BaseRepository = Depends(get_repository)
) -> Booking:
    try:
        booking = booking_service.create_booking(repo, user, request, ticket_price=get_settings().ticket_price)
        return Booking.model_validate(booking)
    except (BookingNotFoundError, BookingConflictError, ValueError) as e:
        raise booking_http_error(e)
    except Exception as e:
        logger.error(f"Booking creation failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create booking")


@router.get("/my", response_model=BookingListResponse)
def my_bookings(
    user: dict = Depends(get_current_user),
    repo: BaseRepository = Depends(get_repository)
) -> BookingListResponse:
    try:
        bookings = booking_service.list_user_bookings(repo, user)
        return BookingListResponse(count=len(bookings), bookings=bookings)
    except Exception as e:
        logger.error(f"Booking list failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch bookings")


@router.get("/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: str,
    user: dict = Depends(get_current_user),
    repo: BaseRepository = Depends(get_repository)
) -> Booking:
    try:
        return Booking.model_validate(booking_service.get_booking_for(repo, booking_id, user))
    except (BookingNotFoundError, PermissionError, ValueError) as e:
        raise booking_http_error(e)
    except Exception as e:
        logger.error(f"Booking lookup failed for {booking_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch booking")


@router.patch("/{booking_id}/cancel", response_model=Booking)
def cancel_booking(
    booking_id: str,
    user: dict = Depends(get_current_user),
    repo: BaseRepository = Depends(get_repository)
) -> Booking:
    try:
        return Booking.model_validate(booking_service.cancel_booking(repo, booking_id, user))
    except (BookingNotFoundError, BookingConflictError, PermissionError, ValueError) as e:
        raise booking_http_error(e)
    except Exception as e:
        logger.error(f"Booking cancellation failed for {booking_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to cancel booking")
