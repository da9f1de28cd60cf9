"""
Shared builders and stubs for flight booking tests.

StubBookingServiceClient implements the client interface with canned
responses and records every call, so tests can assert on what was (not) sent.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional

from src.service.flight_booking.app.dto.booking_service_results import (
    BookingCreated,
    HoldConfirmation,
    PaymentSession,
)
from src.service.flight_booking.app.interface.i_booking_service_client import (
    IBookingServiceClient,
)
from src.service.flight_booking.domain.entity.passenger_entity import (
    Contact,
    Passenger,
    SpecialAssistance,
)
from src.service.flight_booking.domain.entity.seat_entity import Seat, SeatMap
from src.service.flight_booking.domain.enum.passenger_type import PassengerType
from src.service.flight_booking.domain.enum.seat_class import SeatClass
from src.service.flight_booking.domain.enum.seat_status import SeatStatus
from src.service.flight_booking.domain.value_object.addon import Addon
from src.service.flight_booking.domain.value_object.coupon import Coupon


NOW = datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)
FLIGHT_ID = 'AI-202'
TRAVEL_DATE = '2026-03-15'
ORIGIN = 'DEL'
DESTINATION = 'BOM'


def make_seat(
    seat_id: str,
    row: int,
    col: int,
    *,
    seat_class: SeatClass = SeatClass.ECONOMY,
    status: SeatStatus = SeatStatus.AVAILABLE,
    held_by: Optional[str] = None,
    price_modifier: int = 0,
    absolute_price: Optional[float] = None,
    features: tuple[str, ...] = (),
) -> Seat:
    return Seat(
        seat_id=seat_id,
        row=row,
        col=col,
        seat_class=seat_class,
        status=status,
        held_by=held_by,
        price_modifier=price_modifier,
        absolute_price=absolute_price,
        features=frozenset(features),
    )


def make_seat_map(seats: List[Seat], *, base_price: Optional[int] = 5000) -> SeatMap:
    return SeatMap(
        flight_id=FLIGHT_ID,
        travel_date=date.fromisoformat(TRAVEL_DATE),
        origin=ORIGIN,
        destination=DESTINATION,
        rows=max((s.row for s in seats), default=0),
        cols=max((s.col for s in seats), default=0),
        seats=tuple(seats),
        base_price=base_price,
        fetched_at=NOW,
    )


def full_cabin_seat_map(*, base_price: Optional[int] = 5000) -> SeatMap:
    """Rows 20-24, six seats each (A-F). Uniform geometry, so no row looks like an exit row."""
    seats = [
        make_seat(f'{row}{letter}', row, col)
        for row in range(20, 25)
        for col, letter in enumerate('ABCDEF', start=1)
    ]
    return make_seat_map(seats, base_price=base_price)


def adult(**overrides: Any) -> Passenger:
    fields: dict[str, Any] = {
        'first_name': 'Asha',
        'last_name': 'Rao',
        'dob': date(1990, 5, 17),
        'nationality': 'IN',
        'document_type': 'passport',
        'document_number': 'Z1234567',
    }
    fields.update(overrides)
    return Passenger(**fields)


def child(**overrides: Any) -> Passenger:
    return adult(passenger_type=PassengerType.CHILD, first_name='Kiran', dob=date(2018, 1, 2), **overrides)


def assisted(**overrides: Any) -> Passenger:
    return adult(special_assistance=SpecialAssistance(disabled=True), **overrides)


def contact() -> Contact:
    return Contact(name='Asha Rao', email='asha@example.com', phone='+91 98000 00000')


class StubBookingServiceClient(IBookingServiceClient):
    def __init__(
        self,
        *,
        seat_map: Optional[SeatMap] = None,
        hold: Optional[HoldConfirmation] = None,
        booking: Optional[BookingCreated] = None,
        session: Optional[PaymentSession] = None,
        addons: Optional[List[Addon]] = None,
        coupons: Optional[List[Coupon]] = None,
    ) -> None:
        self.seat_map = seat_map or full_cabin_seat_map()
        self.hold = hold or HoldConfirmation(ok=True, hold_until=NOW + timedelta(minutes=10))
        self.booking = booking or BookingCreated(booking={'_id': 'bk-1', 'price': {'amount': 0}})
        self.session = session or PaymentSession(url='https://pay.example/session/1')
        self.addons = addons or []
        self.coupons = coupons or []
        self.errors: dict[str, Exception] = {}
        self.calls: List[tuple[str, dict[str, Any]]] = []

    def fail(self, method: str, error: Exception) -> None:
        self.errors[method] = error

    def calls_to(self, method: str) -> List[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == method]

    def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append((method, kwargs))
        if method in self.errors:
            raise self.errors[method]

    async def fetch_seat_map(self, **kwargs: Any) -> SeatMap:
        self._record('fetch_seat_map', **kwargs)
        return self.seat_map

    async def request_hold(self, **kwargs: Any) -> HoldConfirmation:
        self._record('request_hold', **kwargs)
        return self.hold

    async def create_booking(self, **kwargs: Any) -> BookingCreated:
        self._record('create_booking', **kwargs)
        return self.booking

    async def create_payment_session(self, **kwargs: Any) -> PaymentSession:
        self._record('create_payment_session', **kwargs)
        return self.session

    async def fetch_addons(self) -> List[Addon]:
        self._record('fetch_addons')
        return self.addons

    async def fetch_coupons(self) -> List[Coupon]:
        self._record('fetch_coupons')
        return self.coupons


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)
