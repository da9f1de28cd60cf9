"""
Booking Flow

One explicit struct for the whole per-flow state, moved between steps only
through the pure `transition` function.

    SEAT_SELECTION --hold_confirmed--> HELD --details_opened--> PASSENGER_DETAILS
    PASSENGER_DETAILS --submit_started (live hold only)--> SUBMITTING
    SUBMITTING --submit_succeeded--> COMPLETED
    SUBMITTING --submit_failed--> PASSENGER_DETAILS
    HELD | PASSENGER_DETAILS | SUBMITTING --hold_lost--> SEAT_SELECTION
    any --reset--> SEAT_SELECTION
"""

from typing import Optional

import attrs

from src.platform.exception.exceptions import CustomBaseError, InvalidTransition
from src.service.flight_booking.domain.entity.hold_entity import Hold
from src.service.flight_booking.domain.entity.passenger_entity import Contact, Passenger
from src.service.flight_booking.domain.enum.flow_state import FlowEvent, FlowState
from src.service.flight_booking.domain.value_object.addon import AddonSelection
from src.service.flight_booking.domain.value_object.booking_attempt import BookingAttempt
from src.service.flight_booking.domain.value_object.coupon import Coupon
from src.service.flight_booking.domain.value_object.price_breakdown import (
    EMPTY_BREAKDOWN,
    PriceBreakdown,
)


_HOLDING_STATES = frozenset(
    {FlowState.HELD, FlowState.PASSENGER_DETAILS, FlowState.SUBMITTING}
)

_TRANSITIONS: dict[tuple[FlowState, FlowEvent], FlowState] = {
    (FlowState.SEAT_SELECTION, FlowEvent.HOLD_CONFIRMED): FlowState.HELD,
    (FlowState.HELD, FlowEvent.DETAILS_OPENED): FlowState.PASSENGER_DETAILS,
    (FlowState.PASSENGER_DETAILS, FlowEvent.SUBMIT_STARTED): FlowState.SUBMITTING,
    (FlowState.SUBMITTING, FlowEvent.SUBMIT_SUCCEEDED): FlowState.COMPLETED,
    (FlowState.SUBMITTING, FlowEvent.SUBMIT_FAILED): FlowState.PASSENGER_DETAILS,
    **{(state, FlowEvent.HOLD_LOST): FlowState.SEAT_SELECTION for state in _HOLDING_STATES},
    **{(state, FlowEvent.RESET): FlowState.SEAT_SELECTION for state in FlowState},
}


def transition(state: FlowState, event: FlowEvent, *, hold_live: bool = False) -> FlowState:
    if event == FlowEvent.SUBMIT_STARTED and not hold_live:
        raise InvalidTransition('Cannot submit without an active seat hold')
    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransition(f'Invalid flow transition: {state} --{event}-->')


def blank_passengers(count: int) -> tuple[Passenger, ...]:
    return tuple(Passenger() for _ in range(count))


@attrs.define
class BookingFlow:
    """Mutable per-flow state, passed by reference to every component of one flow."""

    flight_id: str
    travel_date: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    holder_id: str = 'guest'
    currency: str = 'INR'
    fallback_base_fare: Optional[int] = None
    max_selectable: int = 1
    state: FlowState = FlowState.SEAT_SELECTION
    selection: tuple[str, ...] = ()
    hold: Optional[Hold] = None
    passengers: tuple[Passenger, ...] = attrs.field(factory=lambda: blank_passengers(1))
    contact: Contact = attrs.field(factory=Contact)
    addon_selections: tuple[AddonSelection, ...] = ()
    coupon: Optional[Coupon] = None
    price: PriceBreakdown = EMPTY_BREAKDOWN
    last_error: Optional[CustomBaseError] = None
    restriction_notice: Optional[str] = None
    attempt: Optional[BookingAttempt] = None

    @property
    def is_holding(self) -> bool:
        return self.state in _HOLDING_STATES

    def apply(self, event: FlowEvent, *, hold_live: bool = False) -> FlowState:
        self.state = transition(self.state, event, hold_live=hold_live)
        return self.state
