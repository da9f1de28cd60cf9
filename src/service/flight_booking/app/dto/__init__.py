"""Flight Booking Application DTOs"""

from src.service.flight_booking.app.dto.booking_service_results import (
    BookingCreated,
    HoldConfirmation,
    PaymentSession,
)
from src.service.flight_booking.app.dto.checkout_outcome import CheckoutOutcome, CheckoutStatus

__all__ = [
    'BookingCreated',
    'CheckoutOutcome',
    'CheckoutStatus',
    'HoldConfirmation',
    'PaymentSession',
]
