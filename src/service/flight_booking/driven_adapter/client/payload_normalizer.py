"""
Payload Normalizer

The only place that knows the booking service's wire shapes. Everything it
returns is canonical: aware UTC datetimes, integer money where the engine
expects it, enums instead of strings, a fixed seat feature vocabulary.
"""

from datetime import date, datetime, timezone
import math
import re
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from src.platform.exception.exceptions import RemoteServiceError
from src.platform.logging.loguru_io import Logger
from src.service.flight_booking.app.dto.booking_service_results import (
    BookingCreated,
    HoldConfirmation,
    PaymentSession,
)
from src.service.flight_booking.domain.eligibility_domain import apply_aircraft_rules
from src.service.flight_booking.domain.entity.seat_entity import EXTRA_LEGROOM, Seat, SeatMap
from src.service.flight_booking.domain.enum.seat_class import SeatClass
from src.service.flight_booking.domain.enum.seat_status import SeatStatus
from src.service.flight_booking.domain.fare_rules import round_half_up
from src.service.flight_booking.domain.value_object.addon import Addon
from src.service.flight_booking.domain.value_object.coupon import Coupon
from src.service.flight_booking.driven_adapter.client.schema.catalog_schema import (
    AddonPayload,
    CouponPayload,
)
from src.service.flight_booking.driven_adapter.client.schema.seat_map_schema import (
    SeatMapPayload,
    SeatPayload,
)


_BOOKED_STATUSES = {'booked', 'reserved', 'sold', 'confirmed'}
_HELD_STATUSES = {'held', 'hold', 'locked'}
_FEATURE_ALIASES = {
    'extralegroom': EXTRA_LEGROOM,
    'extra_legroom': EXTRA_LEGROOM,
    'exitrow': 'exit_row',
    'exit_row': 'exit_row',
    'window': 'window',
    'aisle': 'aisle',
}


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps from the service are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def finite_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def parse_travel_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def slugify(text: str) -> str:
    return re.sub(r'\s+', '-', text.strip()).lower()


def remote_error_message(body: Any, default: str) -> str:
    if isinstance(body, dict):
        for key in ('error', 'message'):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get('message'), str):
                return value['message']
    return default


# ---------- seat map ----------


def normalize_status(raw: Optional[str]) -> SeatStatus:
    status = (raw or '').strip().lower()
    if status in _BOOKED_STATUSES:
        return SeatStatus.BOOKED
    if status in _HELD_STATUSES:
        return SeatStatus.HELD
    return SeatStatus.AVAILABLE


def normalize_features(raw: Any) -> frozenset[str]:
    if isinstance(raw, dict):
        names: Iterable[Any] = (key for key, enabled in raw.items() if enabled)
    elif isinstance(raw, list | tuple | set):
        names = raw
    else:
        return frozenset()
    features = set()
    for name in names:
        key = str(name).strip().lower()
        if key in _FEATURE_ALIASES:
            features.add(_FEATURE_ALIASES[key])
    return frozenset(features)


def normalize_seat(raw: dict[str, Any]) -> Optional[Seat]:
    try:
        payload = SeatPayload.model_validate(raw)
    except ValidationError as e:
        Logger.base.warning(f'⚠️ [NORMALIZER] Dropping malformed seat {raw!r}: {e.error_count()} errors')
        return None

    if payload.price_modifier is not None and math.isfinite(payload.price_modifier):
        modifier = round_half_up(payload.price_modifier)
    elif payload.class_price is not None and math.isfinite(payload.class_price):
        modifier = round_half_up(payload.class_price)
    else:
        modifier = 0

    return Seat(
        seat_id=payload.seat_id,
        row=payload.row,
        col=payload.col,
        seat_class=SeatClass.normalize(payload.seat_class),
        status=normalize_status(payload.status),
        held_by=str(payload.held_by) if payload.held_by not in (None, '') else None,
        hold_expires_at=as_utc(payload.hold_until),
        price_modifier=modifier,
        absolute_price=finite_number(payload.price),
        features=normalize_features(payload.features),
    )


def resolve_base_price(payload: SeatMapPayload) -> Optional[int]:
    """defaultPrice, basePrice, price.amount (or a bare price), defaultPerSeat, in that order."""
    price = payload.price
    candidates = [
        payload.default_price,
        payload.base_price,
        price.get('amount') if isinstance(price, dict) else price,
        payload.default_per_seat,
    ]
    for candidate in candidates:
        number = finite_number(candidate)
        if number is not None:
            return round_half_up(number)
    return None


def normalize_seat_map(
    body: Any,
    *,
    flight_id: str,
    travel_date: str,
    origin: str,
    destination: str,
    fetched_at: Optional[datetime] = None,
) -> SeatMap:
    raw = body
    if isinstance(body, dict):
        for key in ('seatMap', 'seatmap', 'data'):
            if isinstance(body.get(key), dict):
                raw = body[key]
                break
    try:
        payload = SeatMapPayload.model_validate(raw if isinstance(raw, dict) else {})
        map_date = parse_travel_date(payload.travel_date or travel_date)
    except (ValidationError, ValueError) as e:
        # Malformed snapshot: treated like any transient failure, the next refresh retries
        raise RemoteServiceError(
            f'Malformed seat map for flight {flight_id}: {type(e).__name__}', 502
        ) from e

    seats = [seat for seat in (normalize_seat(s) for s in payload.seats) if seat is not None]
    seats = apply_aircraft_rules(seats, payload.aircraft)

    return SeatMap(
        flight_id=payload.flight_id or flight_id,
        travel_date=map_date,
        origin=payload.origin or origin,
        destination=payload.destination or destination,
        rows=payload.rows or max((s.row for s in seats), default=0),
        cols=payload.cols or max((s.col for s in seats), default=0),
        seats=tuple(seats),
        base_price=resolve_base_price(payload),
        aircraft=payload.aircraft,
        fetched_at=fetched_at or datetime.now(timezone.utc),
    )


# ---------- catalog ----------


def _unwrap_list(body: Any, key: str) -> List[Any]:
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get(key), list):
        return body[key]
    return []


def normalize_addon(raw: Any) -> Optional[Addon]:
    try:
        payload = AddonPayload.model_validate(raw)
    except ValidationError as e:
        Logger.base.warning(f'⚠️ [NORMALIZER] Dropping malformed add-on: {e.error_count()} errors')
        return None
    addon_id = payload.id or payload.code or (slugify(payload.name) if payload.name else None)
    if not addon_id:
        return None
    meta = payload.metadata
    return Addon(
        id=addon_id,
        amount=finite_number(payload.amount) or 0.0,
        per_seat=meta.get('perSeat') is True or meta.get('applyTo') == 'perSeat',
        title=payload.title or payload.name or addon_id,
        category=payload.category,
        currency=payload.currency,
        active=payload.active,
        valid_from=as_utc(payload.valid_from),
        valid_to=as_utc(payload.valid_to),
    )


def normalize_addons(body: Any) -> List[Addon]:
    addons = (normalize_addon(item) for item in _unwrap_list(body, 'addons'))
    return [addon for addon in addons if addon is not None]


def _first_positive(*values: Any) -> Optional[float]:
    for value in values:
        number = finite_number(value)
        if number is not None and number > 0:
            return number
    return None


def normalize_coupon(raw: Any) -> Optional[Coupon]:
    try:
        payload = CouponPayload.model_validate(raw)
    except ValidationError as e:
        Logger.base.warning(f'⚠️ [NORMALIZER] Dropping malformed coupon: {e.error_count()} errors')
        return None
    code = payload.code or payload.title or payload.name
    if not code:
        return None
    meta = payload.metadata
    fixed = _first_positive(payload.amount, meta.get('amount'), meta.get('discountAmount'))
    cap = _first_positive(payload.cap, meta.get('maxDiscount'), meta.get('cap'))
    min_fare = _first_positive(payload.min_fare, meta.get('minAmount'), meta.get('minFare'))
    return Coupon(
        id=payload.id or slugify(code),
        code=code,
        title=payload.title or payload.name or '',
        percent=_first_positive(payload.percent, meta.get('percent'), meta.get('discountPercent')),
        fixed_amount=round_half_up(fixed) if fixed is not None else None,
        cap=round_half_up(cap) if cap is not None else None,
        min_fare=round_half_up(min_fare) if min_fare is not None else None,
        valid_from=as_utc(payload.valid_from),
        valid_to=as_utc(payload.valid_to),
        active=payload.active,
    )


def normalize_coupons(body: Any) -> List[Coupon]:
    coupons = (normalize_coupon(item) for item in _unwrap_list(body, 'coupons'))
    return [coupon for coupon in coupons if coupon is not None]


# ---------- hold / booking / payment ----------


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str) and value:
        try:
            return as_utc(datetime.fromisoformat(value.replace('Z', '+00:00')))
        except ValueError:
            return None
    return None


def normalize_hold_response(body: Any) -> HoldConfirmation:
    if not isinstance(body, dict):
        return HoldConfirmation(ok=False, message='Hold failed')
    if body.get('error') or body.get('success') is False:
        return HoldConfirmation(ok=False, message=remote_error_message(body, 'Hold failed'))
    return HoldConfirmation(
        ok=True,
        hold_until=_parse_datetime(body.get('holdUntil') or body.get('heldUntil')),
    )


def _session_url(body: dict[str, Any]) -> Optional[str]:
    session = body.get('session')
    if isinstance(session, dict) and session.get('url'):
        return str(session['url'])
    for key in ('sessionUrl', 'url'):
        if body.get(key):
            return str(body[key])
    return None


def normalize_booking_response(body: Any) -> BookingCreated:
    if not isinstance(body, dict):
        return BookingCreated(booking={})
    booking = body.get('booking') if isinstance(body.get('booking'), dict) else body
    session = body.get('session')
    url = session.get('url') if isinstance(session, dict) else body.get('sessionUrl')
    return BookingCreated(booking=booking, session_url=str(url) if url else None)


def normalize_payment_session(body: Any) -> PaymentSession:
    if not isinstance(body, dict):
        return PaymentSession()
    data = body.get('data') if isinstance(body.get('data'), dict) else {}
    url = _session_url(body) or (_session_url(data) if data else None)
    session = body.get('session') if isinstance(body.get('session'), dict) else {}
    session_id = body.get('id') or session.get('id') or body.get('sessionId')
    return PaymentSession(url=url, session_id=str(session_id) if session_id else None)
