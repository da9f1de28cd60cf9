"""Flight Booking Domain Enums"""

from src.service.flight_booking.domain.enum.coupon_rejection_reason import CouponRejectionReason
from src.service.flight_booking.domain.enum.flow_state import FlowEvent, FlowState
from src.service.flight_booking.domain.enum.passenger_type import PassengerType
from src.service.flight_booking.domain.enum.seat_class import SeatClass
from src.service.flight_booking.domain.enum.seat_status import SeatStatus

__all__ = [
    'CouponRejectionReason',
    'FlowEvent',
    'FlowState',
    'PassengerType',
    'SeatClass',
    'SeatStatus',
]
