"""
Booking Service HTTP Client

httpx-based adapter for the remote booking/inventory/payment service.
Bodies are encoded and decoded with orjson; every response is handed to the
payload normalizer before it leaves this module.
"""

from typing import Any, List, Optional
from urllib.parse import quote

import httpx
import orjson

from src.platform.exception.exceptions import (
    HoldFailed,
    InventoryUnavailable,
    PriceMismatch,
    RemoteServiceError,
    SubmissionFailed,
)
from src.platform.logging.loguru_io import Logger
from src.service.flight_booking.app.dto.booking_service_results import (
    BookingCreated,
    HoldConfirmation,
    PaymentSession,
)
from src.service.flight_booking.app.interface.i_booking_service_client import (
    IBookingServiceClient,
)
from src.service.flight_booking.domain.entity.seat_entity import SeatMap
from src.service.flight_booking.domain.value_object.addon import Addon
from src.service.flight_booking.domain.value_object.coupon import Coupon
from src.service.flight_booking.driven_adapter.client import payload_normalizer


AMOUNT_MISMATCH = 'amount mismatch'


class BookingServiceClientImpl(IBookingServiceClient):
    def __init__(
        self,
        *,
        base_url: str,
        token: str = '',
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {'Accept': 'application/json', 'Content-Type': 'application/json'}
        if token:
            headers['Authorization'] = f'Bearer {token}'
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, str]] = None,
        body: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> tuple[int, Any]:
        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                content=orjson.dumps(body) if body is not None else None,
                headers=headers,
            )
        except httpx.TransportError as e:
            Logger.base.error(f'❌ [BOOKING_API] {method} {path} failed: {e!r}')
            raise RemoteServiceError(f'Network error: {e}') from e

        payload: Any = None
        if response.content:
            try:
                payload = orjson.loads(response.content)
            except orjson.JSONDecodeError:
                payload = {'message': response.text}
        return response.status_code, payload

    @staticmethod
    def _is_success(status_code: int) -> bool:
        return 200 <= status_code < 300

    @Logger.io
    async def fetch_seat_map(
        self, *, flight_id: str, travel_date: str, origin: str, destination: str
    ) -> SeatMap:
        status_code, payload = await self._request(
            'GET',
            f'/seats/{quote(flight_id, safe="")}',
            params={'date': travel_date, 'origin': origin, 'destination': destination},
        )
        if status_code == 404:
            raise InventoryUnavailable(
                payload_normalizer.remote_error_message(payload, 'Seat map not found')
            )
        if not self._is_success(status_code):
            raise RemoteServiceError(
                payload_normalizer.remote_error_message(payload, f'Seat map request failed ({status_code})'),
                status_code,
            )
        return payload_normalizer.normalize_seat_map(
            payload,
            flight_id=flight_id,
            travel_date=travel_date,
            origin=origin,
            destination=destination,
        )

    @Logger.io
    async def request_hold(
        self,
        *,
        flight_id: str,
        seat_ids: List[str],
        ttl_minutes: int,
        holder_id: str,
        travel_date: str,
        origin: str,
        destination: str,
    ) -> HoldConfirmation:
        status_code, payload = await self._request(
            'POST',
            f'/seats/{quote(flight_id, safe="")}/hold',
            body={
                'seats': seat_ids,
                'holdMinutes': ttl_minutes,
                'heldBy': holder_id,
                'date': travel_date,
                'origin': origin,
                'destination': destination,
            },
        )
        if status_code >= 500:
            raise RemoteServiceError(
                payload_normalizer.remote_error_message(payload, 'Hold failed'), status_code
            )
        if not self._is_success(status_code):
            raise HoldFailed(payload_normalizer.remote_error_message(payload, 'Hold failed'))

        confirmation = payload_normalizer.normalize_hold_response(payload)
        if not confirmation.ok:
            raise HoldFailed(confirmation.message or 'Hold failed')
        return confirmation

    @Logger.io
    async def create_booking(
        self, *, payload: dict[str, Any], idempotency_key: str
    ) -> BookingCreated:
        status_code, body = await self._request(
            'POST',
            '/bookings',
            params={'createSession': 'true'},
            body=payload,
            headers={'Idempotency-Key': idempotency_key},
        )
        if not self._is_success(status_code) or (isinstance(body, dict) and body.get('error')):
            raise SubmissionFailed(
                payload_normalizer.remote_error_message(body, 'Failed creating booking'),
                status_code if status_code >= 400 else 502,
            )
        return payload_normalizer.normalize_booking_response(body)

    @Logger.io
    async def create_payment_session(
        self, *, booking_id: str, amount: int, currency: str, idempotency_key: str
    ) -> PaymentSession:
        status_code, body = await self._request(
            'POST',
            '/payments/create-checkout-session',
            body={
                'bookingId': booking_id,
                'amount': amount,
                'currency': currency,
                'idempotencyKey': idempotency_key,
            },
            headers={'Idempotency-Key': idempotency_key},
        )
        if isinstance(body, dict) and AMOUNT_MISMATCH in (body.get('error'), body.get('message')):
            client_hint = body.get('clientComputed', body.get('bookingHint', amount))
            raise PriceMismatch(
                f'Pricing mismatch (server: {body.get("serverComputed")} vs client: {client_hint})',
                server_computed=body.get('serverComputed'),
                client_computed=client_hint,
            )

        session = payload_normalizer.normalize_payment_session(body)
        if not self._is_success(status_code) or (session.url is None and isinstance(body, dict) and body.get('error')):
            raise SubmissionFailed(
                payload_normalizer.remote_error_message(body, 'Failed creating checkout session'),
                status_code if status_code >= 400 else 502,
            )
        return session

    async def _fetch_list(self, path: str) -> Any:
        status_code, payload = await self._request('GET', path)
        if not self._is_success(status_code):
            raise RemoteServiceError(
                payload_normalizer.remote_error_message(payload, f'GET {path} failed ({status_code})'),
                status_code,
            )
        return payload

    @Logger.io
    async def fetch_addons(self) -> List[Addon]:
        return payload_normalizer.normalize_addons(await self._fetch_list('/addons'))

    @Logger.io
    async def fetch_coupons(self) -> List[Coupon]:
        return payload_normalizer.normalize_coupons(await self._fetch_list('/coupons'))
