"""
Integration test for one booking flow end to end

The coordinator is wired through the DI container with the real HTTP client;
only the network is replaced, by an in-memory booking service behind
httpx.MockTransport.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any

from dependency_injector import providers
import httpx
import orjson
import pytest

from src.platform.config.di import container, create_booking_flow_coordinator
from src.service.flight_booking.app.dto.checkout_outcome import CheckoutStatus
from src.service.flight_booking.domain.enum.flow_state import FlowState
from src.service.flight_booking.driven_adapter.client.booking_service_client_impl import (
    BookingServiceClientImpl,
)
from test.service.flight_booking.fixtures import (
    DESTINATION,
    FLIGHT_ID,
    ORIGIN,
    TRAVEL_DATE,
    contact,
)


pytestmark = pytest.mark.integration


class InMemoryBookingService:
    """Just enough of the booking service to take one flow from seat map to payment."""

    def __init__(self) -> None:
        self.held: dict[str, str] = {}
        self.bookings: list[dict[str, Any]] = []
        self.idempotency_keys: list[str] = []

    def _seat(self, row: int, col: int) -> dict[str, Any]:
        seat_id = f'{row}{"ABCDEF"[col - 1]}'
        seat: dict[str, Any] = {'seatId': seat_id, 'row': row, 'col': col, 'seatClass': 'Economy'}
        if seat_id in self.held:
            seat |= {'status': 'held', 'heldBy': self.held[seat_id]}
        return seat

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix('/api')
        body = orjson.loads(request.content) if request.content else {}

        if request.method == 'GET' and path == f'/seats/{FLIGHT_ID}':
            seats = [self._seat(row, col) for row in range(20, 24) for col in range(1, 7)]
            return self._json(200, {'seatMap': {'rows': 4, 'cols': 6, 'defaultPrice': 5000, 'seats': seats}})

        if request.method == 'POST' and path == f'/seats/{FLIGHT_ID}/hold':
            taken = [s for s in body['seats'] if self.held.get(s, body['heldBy']) != body['heldBy']]
            if taken:
                return self._json(409, {'error': f'Seats already held: {", ".join(taken)}'})
            for seat_id in body['seats']:
                self.held[seat_id] = body['heldBy']
            hold_until = datetime.now(timezone.utc) + timedelta(minutes=body['holdMinutes'])
            return self._json(200, {'ok': True, 'holdUntil': hold_until.isoformat()})

        if request.method == 'POST' and path == '/bookings':
            self.idempotency_keys.append(request.headers['Idempotency-Key'])
            booking = {'_id': f'bk-{len(self.bookings) + 1}', 'price': {'amount': body['price']['amount']}}
            self.bookings.append(body)
            return self._json(201, {'booking': booking})

        if request.method == 'POST' and path == '/payments/create-checkout-session':
            return self._json(200, {'url': f'https://pay.test/{body["bookingId"]}', 'id': 'cs_1'})

        if path == '/addons':
            return self._json(200, [{'id': 'meal', 'title': 'Hot meal', 'amount': 400, 'metadata': {'perSeat': True}}])
        if path == '/coupons':
            return self._json(200, [{'code': 'SAVE10', 'percent': 10, 'metadata': {'maxDiscount': 500}}])

        return self._json(404, {'message': 'Not found'})

    @staticmethod
    def _json(status_code: int, body: Any) -> httpx.Response:
        return httpx.Response(status_code, content=orjson.dumps(body))


@pytest.fixture
def booking_service():
    service = InMemoryBookingService()
    client = BookingServiceClientImpl(
        base_url='http://booking.test/api', transport=httpx.MockTransport(service)
    )
    with container.booking_service_client.override(providers.Object(client)):
        yield service


class TestBookingFlow:
    @pytest.mark.asyncio
    async def test_two_adults_hold_and_pay(self, booking_service: InMemoryBookingService):
        # Given: a coordinator for one flight, started
        coordinator = create_booking_flow_coordinator(
            flight_id=FLIGHT_ID,
            travel_date=TRAVEL_DATE,
            origin=ORIGIN,
            destination=DESTINATION,
            holder_id='user-42',
        )

        async with coordinator:
            flow = coordinator.flow
            assert coordinator.inventory.seat_map is not None
            assert set(coordinator.addon_catalog) == {'meal'}

            # When: two adults pick seats, add a meal and a coupon
            coordinator.set_passenger_count(2)
            coordinator.toggle_seat('21A')
            coordinator.toggle_seat('21B')
            coordinator.toggle_addon('meal')
            evaluation = coordinator.apply_coupon('save10')

            # Then: 10000 seats + 800 meals - 500 capped coupon + 5% tax
            assert evaluation.amount == 500
            assert flow.price.total == 10815

            # When: seats are held and details entered
            await coordinator.request_hold()
            assert flow.state == FlowState.HELD
            assert booking_service.held == {'21A': 'user-42', '21B': 'user-42'}

            coordinator.proceed_to_passenger_details()
            for index, (first, last) in enumerate((('Asha', 'Rao'), ('Vikram', 'Rao'))):
                coordinator.update_passenger(
                    index,
                    first_name=first,
                    last_name=last,
                    dob=date(1990, 1, index + 1),
                    document_type='passport',
                    document_number=f'P00{index}',
                )
            coordinator.set_contact(contact())

            outcome = await coordinator.submit()

        # Then: booking created with the client's total, then redirected to payment
        assert outcome.status == CheckoutStatus.COMPLETED
        assert outcome.redirect_url == 'https://pay.test/bk-1'
        assert flow.state == FlowState.COMPLETED

        payload = booking_service.bookings[0]
        assert payload['seats'] == ['21A', '21B']
        assert payload['price']['amount'] == 10815
        assert payload['coupons'] == [{'code': 'SAVE10', 'amount': 500}]
        assert [p['seat'] for p in payload['passengers']] == ['21A', '21B']
        assert booking_service.idempotency_keys == [payload['idempotencyKey']]

    @pytest.mark.asyncio
    async def test_hold_conflict_keeps_selection(self, booking_service: InMemoryBookingService):
        # Given: another client already holds 21B
        booking_service.held['21B'] = 'someone-else'
        coordinator = create_booking_flow_coordinator(
            flight_id=FLIGHT_ID, travel_date=TRAVEL_DATE, origin=ORIGIN, destination=DESTINATION
        )
        await coordinator.refresh_seat_map()

        # When: the held seat cannot be selected, so a free one is held instead
        coordinator.toggle_seat('21B')
        assert coordinator.flow.selection == ()
        coordinator.toggle_seat('21C')
        hold = await coordinator.request_hold()

        # Then
        assert hold.seats == ('21C',)
        assert coordinator.flow.state == FlowState.HELD
