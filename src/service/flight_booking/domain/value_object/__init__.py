"""Flight Booking Domain Value Objects"""

from src.service.flight_booking.domain.value_object.addon import Addon, AddonSelection
from src.service.flight_booking.domain.value_object.booking_attempt import (
    AttemptStatus,
    BookingAttempt,
)
from src.service.flight_booking.domain.value_object.coupon import Coupon, CouponEvaluation
from src.service.flight_booking.domain.value_object.price_breakdown import (
    EMPTY_BREAKDOWN,
    AddonLine,
    PriceBreakdown,
    SeatQuote,
)

__all__ = [
    'EMPTY_BREAKDOWN',
    'Addon',
    'AddonLine',
    'AddonSelection',
    'AttemptStatus',
    'BookingAttempt',
    'Coupon',
    'CouponEvaluation',
    'PriceBreakdown',
    'SeatQuote',
]
