"""Flight Booking Domain Entities"""

from src.service.flight_booking.domain.entity.hold_entity import Hold
from src.service.flight_booking.domain.entity.passenger_entity import (
    Contact,
    Passenger,
    SpecialAssistance,
)
from src.service.flight_booking.domain.entity.seat_entity import EXTRA_LEGROOM, Seat, SeatMap

__all__ = ['EXTRA_LEGROOM', 'Contact', 'Hold', 'Passenger', 'Seat', 'SeatMap', 'SpecialAssistance']
