"""
Checkout Use Case

Turns a held, fully priced flow into a booking and a payment session.

1. Validate passengers and contact locally (no network on failure)
2. Confirm the hold is still live and covers exactly the selection
3. Issue (or reuse) the idempotency key for this exact price breakdown
4. Create the booking; follow its session URL if it returned one
5. Otherwise create the payment session for the booking

The service is authoritative for the charge. A price mismatch is reported,
never resolved by adopting the server amount.
"""

import math
import re
from typing import Any, Optional

from opentelemetry import trace
import uuid_utils

from src.platform.exception.exceptions import (
    HoldLost,
    IdempotencyKeyConflict,
    PreconditionFailure,
    PriceMismatch,
    RemoteServiceError,
    SubmissionFailed,
    ValidationFailure,
)
from src.platform.logging.loguru_io import Logger
from src.service.flight_booking.app.dto.checkout_outcome import CheckoutOutcome, CheckoutStatus
from src.service.flight_booking.app.interface.i_booking_service_client import (
    IBookingServiceClient,
)
from src.service.flight_booking.domain.booking_flow import BookingFlow
from src.service.flight_booking.domain.clock import Clock, utc_now
from src.service.flight_booking.domain.entity.passenger_entity import Contact, Passenger
from src.service.flight_booking.domain.enum.flow_state import FlowEvent
from src.service.flight_booking.domain.value_object.booking_attempt import (
    AttemptStatus,
    BookingAttempt,
)
from src.service.flight_booking.domain.value_object.price_breakdown import PriceBreakdown


_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def validate_passengers(passengers: tuple[Passenger, ...]) -> None:
    for number, passenger in enumerate(passengers, start=1):
        if not passenger.first_name.strip() or not passenger.last_name.strip():
            raise ValidationFailure(f'Passenger {number}: full name required')
        if passenger.dob is None:
            raise ValidationFailure(f'Passenger {number}: date of birth required')
        if not passenger.document_type.strip() or not passenger.document_number.strip():
            raise ValidationFailure(f'Passenger {number}: ID document required')


def validate_contact(contact: Contact) -> None:
    if not contact.name.strip() or not contact.email.strip():
        raise ValidationFailure('Contact name & email required')
    if not _EMAIL_RE.match(contact.email.strip()):
        raise ValidationFailure('Contact email is not valid')


def passenger_payload(passenger: Passenger) -> dict[str, Any]:
    return {
        'title': passenger.title,
        'firstName': passenger.first_name.strip(),
        'lastName': passenger.last_name.strip(),
        'dob': passenger.dob.isoformat() if passenger.dob else None,
        'gender': passenger.gender,
        'nationality': passenger.nationality,
        'documentType': passenger.document_type,
        'documentNumber': passenger.document_number,
        'passengerType': str(passenger.passenger_type),
        'specialAssistance': {'disabled': passenger.special_assistance.disabled},
        'seat': passenger.seat_id,
    }


def build_booking_payload(flow: BookingFlow, *, idempotency_key: str) -> dict[str, Any]:
    """Wire body for POST /bookings. Field names follow the booking service."""
    price = flow.price
    seats = list(flow.hold.seats) if flow.hold else list(flow.selection)
    coupon = price.coupon
    return {
        'flightId': flow.flight_id,
        'travelDate': flow.travel_date,
        'origin': flow.origin,
        'destination': flow.destination,
        'seats': seats,
        'passengers': [passenger_payload(p) for p in flow.passengers],
        'contact': {
            'name': flow.contact.name.strip(),
            'email': flow.contact.email.strip(),
            'phone': flow.contact.phone.strip(),
        },
        'price': {
            'amount': price.total,
            'currency': flow.currency,
            'perSeat': round(price.seats_subtotal / len(seats)) if seats else 0,
            'tax': price.tax,
            'breakdown': {
                'seats': price.seats_subtotal,
                'addons': price.addons_total,
                'discount': price.discount,
                'tax': price.tax,
            },
        },
        'seatsMeta': [
            {
                'seatId': quote.seat_id,
                'seatClass': str(quote.seat_class),
                'priceModifier': quote.price_modifier,
                'basePrice': quote.base_price,
                'price': quote.final_price,
                'discountApplied': quote.discount_applied,
                'passengerType': str(quote.passenger_type),
                'assistance': quote.assistance,
            }
            for quote in price.seat_quotes
        ],
        'addons': [
            {
                'offerId': line.addon_id,
                'title': line.title,
                'qty': line.qty,
                'perSeat': line.per_seat,
                'amount': line.amount,
            }
            for line in price.addon_lines
        ],
        'coupons': (
            [{'code': coupon.code, 'amount': coupon.amount}] if coupon and coupon.applied else []
        ),
        'heldBy': flow.holder_id,
        'idempotencyKey': idempotency_key,
        'createSession': True,
    }


class CheckoutUseCase:
    def __init__(self, *, client: IBookingServiceClient, clock: Clock = utc_now) -> None:
        self.client = client
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)
        # Only the current attempt's key is ever reused; it lives until completion
        self._last_key: Optional[str] = None
        self._last_fingerprint: Optional[bytes] = None

    def issue_idempotency_key(self, breakdown: PriceBreakdown) -> str:
        """Reuse the previous key only for a byte-identical breakdown."""
        fingerprint = breakdown.fingerprint()
        if self._last_key is not None and self._last_fingerprint == fingerprint:
            return self._last_key
        key = str(uuid_utils.uuid7())
        self._last_key = key
        self._last_fingerprint = fingerprint
        return key

    def _guard_key(self, key: str, breakdown: PriceBreakdown) -> None:
        if key != self._last_key or self._last_fingerprint != breakdown.fingerprint():
            raise IdempotencyKeyConflict(
                f'Idempotency key {key} was issued for a different price breakdown'
            )

    def _check_hold(self, flow: BookingFlow) -> None:
        hold = flow.hold
        if hold is not None and hold.is_live(self.clock()) and hold.covers_exactly(flow.selection):
            return
        flow.hold = None
        flow.selection = ()
        if flow.is_holding:
            flow.apply(FlowEvent.HOLD_LOST)
        if flow.attempt is not None and flow.attempt.status != AttemptStatus.COMPLETED:
            flow.attempt.status = AttemptStatus.HOLD_LOST
        flow.last_error = HoldLost('Seats are no longer held. Please hold your seats again.')
        Logger.base.warning(f'⚠️ [CHECKOUT] Hold lost before submission on flight {flow.flight_id}')
        raise flow.last_error

    @Logger.io
    async def execute(self, *, flow: BookingFlow) -> CheckoutOutcome:
        """
        Submit the booking for a held flow.

        Raises:
            ValidationFailure: Passenger or contact data incomplete
            HoldLost: No live hold covering the selection; flow is back at seat selection
            PreconditionFailure: Total is not a positive amount
            PriceMismatch: The service computed a different amount
            SubmissionFailed: The service rejected the booking or session
        """
        validate_passengers(flow.passengers)
        validate_contact(flow.contact)
        self._check_hold(flow)

        breakdown = flow.price
        if not math.isfinite(breakdown.total) or breakdown.total <= 0:
            raise PreconditionFailure('Total must be a positive amount before checkout')

        key = self.issue_idempotency_key(breakdown)
        flow.apply(FlowEvent.SUBMIT_STARTED, hold_live=True)
        flow.last_error = None
        attempt = BookingAttempt(
            idempotency_key=key,
            passengers=flow.passengers,
            contact=flow.contact,
            seats=tuple(flow.hold.seats),  # type: ignore[union-attr]
            price_breakdown=breakdown,
        )
        flow.attempt = attempt

        with self.tracer.start_as_current_span(
            'use_case.checkout',
            attributes={
                'flight.id': flow.flight_id,
                'booking.seats': list(attempt.seats),
                'booking.total': breakdown.total,
                'booking.idempotency_key': key,
            },
        ):
            Logger.base.info(
                f'📝 [CHECKOUT] Submitting booking for {list(attempt.seats)} '
                f'(total={breakdown.total} {flow.currency}, key={key})'
            )
            try:
                self._guard_key(key, breakdown)
                created = await self.client.create_booking(
                    payload=build_booking_payload(flow, idempotency_key=key),
                    idempotency_key=key,
                )
                if created.server_total is not None and created.server_total != breakdown.total:
                    Logger.base.warning(
                        f'⚠️ [CHECKOUT] Server total {created.server_total} differs from client '
                        f'total {breakdown.total} for key {key}'
                    )

                if created.session_url:
                    return self._complete(flow, attempt, redirect_url=created.session_url, booking=created.booking)

                booking_id = created.booking_id
                if booking_id is None:
                    return self._complete(flow, attempt, redirect_url=None, booking=created.booking)

                self._guard_key(key, breakdown)
                session = await self.client.create_payment_session(
                    booking_id=booking_id,
                    amount=breakdown.total,
                    currency=flow.currency,
                    idempotency_key=key,
                )
                return self._complete(flow, attempt, redirect_url=session.url, booking=created.booking)

            except PriceMismatch as e:
                Logger.base.error(
                    f'❌ [CHECKOUT] Amount mismatch: server={e.server_computed} '
                    f'client={breakdown.total} key={key}'
                )
                self._fail(flow, attempt, e)
                raise
            except SubmissionFailed as e:
                self._fail(flow, attempt, e)
                raise
            except RemoteServiceError as e:
                error = SubmissionFailed(e.message, e.status_code)
                self._fail(flow, attempt, error)
                raise error from e

    def _complete(
        self,
        flow: BookingFlow,
        attempt: BookingAttempt,
        *,
        redirect_url: Optional[str],
        booking: Optional[dict[str, Any]],
    ) -> CheckoutOutcome:
        attempt.status = AttemptStatus.COMPLETED
        attempt.booking = booking
        attempt.redirect_url = redirect_url
        flow.apply(FlowEvent.SUBMIT_SUCCEEDED)
        flow.hold = None
        flow.selection = ()
        self._last_key = None
        self._last_fingerprint = None
        Logger.base.info(
            f'✅ [CHECKOUT] Booking completed (key={attempt.idempotency_key}, '
            f'redirect={"yes" if redirect_url else "no"})'
        )
        return CheckoutOutcome(
            status=CheckoutStatus.COMPLETED,
            idempotency_key=attempt.idempotency_key,
            redirect_url=redirect_url,
            booking=booking,
        )

    def _fail(self, flow: BookingFlow, attempt: BookingAttempt, error: Exception) -> None:
        attempt.status = AttemptStatus.FAILED
        attempt.error = str(error)
        flow.last_error = error  # type: ignore[assignment]
        flow.apply(FlowEvent.SUBMIT_FAILED)
        Logger.base.error(f'❌ [CHECKOUT] Submission failed (key={attempt.idempotency_key}): {error}')
