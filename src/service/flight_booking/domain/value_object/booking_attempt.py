from enum import StrEnum
from typing import Any, Optional

import attrs

from src.service.flight_booking.domain.entity.passenger_entity import Contact, Passenger
from src.service.flight_booking.domain.value_object.price_breakdown import PriceBreakdown


class AttemptStatus(StrEnum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    HOLD_LOST = 'hold_lost'


@attrs.define
class BookingAttempt:
    idempotency_key: str
    passengers: tuple[Passenger, ...]
    contact: Contact
    seats: tuple[str, ...]
    price_breakdown: PriceBreakdown
    status: AttemptStatus = AttemptStatus.PENDING
    booking: Optional[dict[str, Any]] = None
    redirect_url: Optional[str] = None
    error: Optional[str] = None
