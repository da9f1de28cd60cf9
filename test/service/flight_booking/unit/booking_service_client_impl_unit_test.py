"""
Unit tests for BookingServiceClientImpl

Requests go through httpx.MockTransport; no network.

Test Coverage:
1. Endpoints, query parameters, headers and bodies
2. Status mapping: 404 terminal, 5xx transient, 4xx refusal with remote message
3. Amount mismatch on payment session
"""

from typing import Callable

import httpx
import orjson
import pytest

from src.platform.exception.exceptions import (
    HoldFailed,
    InventoryUnavailable,
    PriceMismatch,
    RemoteServiceError,
    SubmissionFailed,
)
from src.service.flight_booking.driven_adapter.client.booking_service_client_impl import (
    BookingServiceClientImpl,
)


pytestmark = pytest.mark.unit

BASE_URL = 'http://booking.test/api'
SEAT_CONTEXT = {
    'flight_id': 'AI-202',
    'travel_date': '2026-03-15',
    'origin': 'DEL',
    'destination': 'BOM',
}


def _client(handler: Callable[[httpx.Request], httpx.Response], token: str = 'secret-token'):
    return BookingServiceClientImpl(
        base_url=BASE_URL, token=token, transport=httpx.MockTransport(handler)
    )


def _json(status_code: int, body) -> httpx.Response:
    return httpx.Response(status_code, content=orjson.dumps(body))


class RecordingHandler:
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_body(self):
        return orjson.loads(self.last.content)


class TestFetchSeatMap:
    @pytest.mark.asyncio
    async def test_get_with_route_query_and_bearer_token(self):
        handler = RecordingHandler(
            _json(200, {'rows': 1, 'cols': 1, 'seats': [{'seatId': '1A', 'row': 1, 'col': 1}]})
        )
        client = _client(handler)

        seat_map = await client.fetch_seat_map(**SEAT_CONTEXT)

        request = handler.last
        assert request.method == 'GET'
        assert request.url.path == '/api/seats/AI-202'
        assert dict(request.url.params) == {'date': '2026-03-15', 'origin': 'DEL', 'destination': 'BOM'}
        assert request.headers['Authorization'] == 'Bearer secret-token'
        assert '1A' in seat_map
        await client.aclose()

    @pytest.mark.asyncio
    async def test_anonymous_client_sends_no_authorization(self):
        handler = RecordingHandler(_json(200, {'seats': []}))
        client = _client(handler, token='')

        await client.fetch_seat_map(**SEAT_CONTEXT)

        assert 'Authorization' not in handler.last.headers

    @pytest.mark.asyncio
    async def test_not_found_is_inventory_unavailable(self):
        client = _client(RecordingHandler(_json(404, {'message': 'No seat map'})))

        with pytest.raises(InventoryUnavailable) as exc_info:
            await client.fetch_seat_map(**SEAT_CONTEXT)

        assert exc_info.value.message == 'No seat map'

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        client = _client(RecordingHandler(_json(502, {'error': 'upstream'})))

        with pytest.raises(RemoteServiceError) as exc_info:
            await client.fetch_seat_map(**SEAT_CONTEXT)

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_malformed_ok_body_is_transient(self):
        client = _client(RecordingHandler(_json(200, {'rows': 'many', 'seats': 'oops'})))

        with pytest.raises(RemoteServiceError) as exc_info:
            await client.fetch_seat_map(**SEAT_CONTEXT)

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_network_failure_is_transient(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('connection refused', request=request)

        client = _client(handler)

        with pytest.raises(RemoteServiceError):
            await client.fetch_seat_map(**SEAT_CONTEXT)


class TestRequestHold:
    HOLD_ARGS = {
        'flight_id': 'AI-202',
        'seat_ids': ['22A', '22B'],
        'ttl_minutes': 10,
        'holder_id': 'user-42',
        'travel_date': '2026-03-15',
        'origin': 'DEL',
        'destination': 'BOM',
    }

    @pytest.mark.asyncio
    async def test_hold_body(self):
        handler = RecordingHandler(_json(200, {'ok': True, 'holdUntil': '2026-03-01T10:10:00Z'}))
        client = _client(handler)

        confirmation = await client.request_hold(**self.HOLD_ARGS)

        assert handler.last.method == 'POST'
        assert handler.last.url.path == '/api/seats/AI-202/hold'
        assert handler.last_body == {
            'seats': ['22A', '22B'],
            'holdMinutes': 10,
            'heldBy': 'user-42',
            'date': '2026-03-15',
            'origin': 'DEL',
            'destination': 'BOM',
        }
        assert confirmation.ok is True
        assert confirmation.hold_until is not None

    @pytest.mark.asyncio
    async def test_conflict_message_is_verbatim(self):
        client = _client(RecordingHandler(_json(409, {'error': 'Seat 22B already held'})))

        with pytest.raises(HoldFailed) as exc_info:
            await client.request_hold(**self.HOLD_ARGS)

        assert exc_info.value.message == 'Seat 22B already held'

    @pytest.mark.asyncio
    async def test_success_false_in_ok_response_is_refusal(self):
        client = _client(RecordingHandler(_json(200, {'success': False, 'message': 'Too late'})))

        with pytest.raises(HoldFailed) as exc_info:
            await client.request_hold(**self.HOLD_ARGS)

        assert exc_info.value.message == 'Too late'

    @pytest.mark.asyncio
    async def test_server_error_is_remote_error(self):
        client = _client(RecordingHandler(_json(503, {'message': 'maintenance'})))

        with pytest.raises(RemoteServiceError):
            await client.request_hold(**self.HOLD_ARGS)


class TestBookingAndPayment:
    @pytest.mark.asyncio
    async def test_create_booking_sends_idempotency_key(self):
        handler = RecordingHandler(
            _json(201, {'booking': {'_id': 'bk-1'}, 'session': {'url': 'https://pay/1'}})
        )
        client = _client(handler)

        created = await client.create_booking(payload={'seats': ['22A']}, idempotency_key='key-1')

        assert handler.last.url.path == '/api/bookings'
        assert handler.last.url.params['createSession'] == 'true'
        assert handler.last.headers['Idempotency-Key'] == 'key-1'
        assert handler.last_body == {'seats': ['22A']}
        assert created.session_url == 'https://pay/1'

    @pytest.mark.asyncio
    async def test_create_booking_rejection(self):
        client = _client(RecordingHandler(_json(400, {'message': 'Passenger 1: DOB required'})))

        with pytest.raises(SubmissionFailed) as exc_info:
            await client.create_booking(payload={}, idempotency_key='key-1')

        assert exc_info.value.message == 'Passenger 1: DOB required'
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_payment_session(self):
        handler = RecordingHandler(_json(200, {'url': 'https://pay/2', 'id': 'cs_2'}))
        client = _client(handler)

        session = await client.create_payment_session(
            booking_id='bk-1', amount=5250, currency='INR', idempotency_key='key-1'
        )

        assert handler.last.url.path == '/api/payments/create-checkout-session'
        assert handler.last_body == {
            'bookingId': 'bk-1',
            'amount': 5250,
            'currency': 'INR',
            'idempotencyKey': 'key-1',
        }
        assert session.url == 'https://pay/2'
        assert session.session_id == 'cs_2'

    @pytest.mark.asyncio
    async def test_amount_mismatch(self):
        client = _client(
            RecordingHandler(
                _json(409, {'message': 'amount mismatch', 'serverComputed': 5300, 'bookingHint': 5250})
            )
        )

        with pytest.raises(PriceMismatch) as exc_info:
            await client.create_payment_session(
                booking_id='bk-1', amount=5250, currency='INR', idempotency_key='key-1'
            )

        assert exc_info.value.server_computed == 5300
        assert exc_info.value.client_computed == 5250

    @pytest.mark.asyncio
    async def test_amount_mismatch_reported_under_error(self):
        client = _client(
            RecordingHandler(
                _json(409, {'error': 'amount mismatch', 'serverComputed': 5300, 'clientComputed': 5250})
            )
        )

        with pytest.raises(PriceMismatch) as exc_info:
            await client.create_payment_session(
                booking_id='bk-1', amount=5250, currency='INR', idempotency_key='key-1'
            )

        assert exc_info.value.server_computed == 5300
        assert exc_info.value.client_computed == 5250


class TestCatalog:
    @pytest.mark.asyncio
    async def test_fetch_addons_and_coupons(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == '/api/addons':
                return _json(200, {'addons': [{'id': 'meal', 'amount': 400}]})
            return _json(200, [{'code': 'TEN', 'percent': 10}])

        client = _client(handler)

        addons = await client.fetch_addons()
        coupons = await client.fetch_coupons()

        assert [a.id for a in addons] == ['meal']
        assert [c.code for c in coupons] == ['TEN']

    @pytest.mark.asyncio
    async def test_catalog_failure_raises(self):
        client = _client(RecordingHandler(_json(500, {'error': 'boom'})))

        with pytest.raises(RemoteServiceError):
            await client.fetch_addons()
