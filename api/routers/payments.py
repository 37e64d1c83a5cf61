"""
Payments Router - Pay for a pending booking
"""

import logging
from fastapi import APIRouter, Depends, HTTPException

from api.schemas.bookings import Booking, PaymentRequest, PaymentResponse
from api.dependencies import get_current_user, get_repository
from api.repositories.base import BaseRepository
from api.routers.bookings import booking_http_error
from api.services import booking_service
from api.services.booking_service import BookingConflictError, BookingNotFoundError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=PaymentResponse)
def pay(
    request: PaymentRequest,
    user: dict = Depends(get_current_user),
    repo: BaseRepository = Depends(get_repository)
) -> PaymentResponse:
    """
    Record a payment for a booking and confirm it.

    The amount is always the booking total; no payment gateway is contacted.
    """
    try:
        booking = booking_service.pay_booking(repo, request, user)
        return PaymentResponse(
            message="Payment successful",
            payment=booking["payment"],
            booking=Booking.model_validate(booking)
        )
    except (BookingNotFoundError, BookingConflictError, PermissionError, ValueError) as e:
        raise booking_http_error(e)
    except Exception as e:
        logger.error(f"Payment failed for booking {request.booking_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Payment failed")
