"""Booking flow states and the events that move between them."""

from enum import StrEnum


class FlowState(StrEnum):
    SEAT_SELECTION = 'seat_selection'
    HELD = 'held'
    PASSENGER_DETAILS = 'passenger_details'
    SUBMITTING = 'submitting'
    COMPLETED = 'completed'


class FlowEvent(StrEnum):
    HOLD_CONFIRMED = 'hold_confirmed'
    DETAILS_OPENED = 'details_opened'
    SUBMIT_STARTED = 'submit_started'
    SUBMIT_SUCCEEDED = 'submit_succeeded'
    SUBMIT_FAILED = 'submit_failed'
    HOLD_LOST = 'hold_lost'
    RESET = 'reset'
