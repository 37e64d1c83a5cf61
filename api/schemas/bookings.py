"""
Booking API Schemas - Seat bookings and their payment records
"""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator


class BookingCreate(BaseModel):
    """Seats requested for one showtime"""

    movie_id: str = Field(..., description="Movie being booked")
    theater_id: str = Field(..., description="Theater hosting the showtime")
    showtime_id: str = Field(..., description="Showtime identifier")
    seats: List[str] = Field(..., min_length=1, description="Seat codes, e.g. ['A1', 'A2']")

    @field_validator("seats")
    @classmethod
    def normalize_seats(cls, v: List[str]) -> List[str]:
        seats = [s.strip().upper() for s in v]
        if len(set(seats)) != len(seats):
            raise ValueError("Duplicate seats in request")
        return seats


class PaymentRecord(BaseModel):
    payment_id: str
    method: str
    amount: float
    status: Literal["succeeded"] = "succeeded"
    paid_at: datetime


class Booking(BaseModel):
    id: str
    user_id: str
    movie_id: str
    theater_id: str
    showtime_id: str
    movie_title: Optional[str] = None
    theater_name: Optional[str] = None
    start_time: Optional[datetime] = None
    seats: List[str]
    total_price: float
    status: Literal["pending", "confirmed", "cancelled"] = "pending"
    payment_status: Literal["unpaid", "paid"] = "unpaid"
    payment: Optional[PaymentRecord] = None
    created_at: Optional[datetime] = None


class BookingListResponse(BaseModel):
    count: int
    bookings: List[Booking]


class PaymentRequest(BaseModel):
    booking_id: str = Field(..., description="Booking to pay for")
    method: Literal["card", "upi", "netbanking", "wallet"] = Field("card", description="Payment method")


class PaymentResponse(BaseModel):
    message: str
    payment: PaymentRecord
    booking: Booking
