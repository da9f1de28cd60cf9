"""Flight Booking Application Interfaces"""

from src.service.flight_booking.app.interface.i_booking_service_client import (
    IBookingServiceClient,
)

__all__ = ['IBookingServiceClient']
