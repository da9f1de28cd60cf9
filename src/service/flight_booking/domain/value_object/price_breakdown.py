from typing import Optional

import attrs
import orjson

from src.service.flight_booking.domain.enum.passenger_type import PassengerType
from src.service.flight_booking.domain.enum.seat_class import SeatClass
from src.service.flight_booking.domain.value_object.coupon import CouponEvaluation


@attrs.define(frozen=True)
class SeatQuote:
    """Per-seat pricing line, sent to the booking service as seat metadata."""

    seat_id: str
    seat_class: SeatClass
    price_modifier: int
    base_price: int
    final_price: int
    passenger_type: PassengerType
    assistance: bool

    @property
    def discount_applied(self) -> int:
        return max(0, self.base_price - self.final_price)


@attrs.define(frozen=True)
class AddonLine:
    addon_id: str
    title: str
    qty: int
    per_seat: bool
    amount: int


@attrs.define(frozen=True)
class PriceBreakdown:
    """Derived price of the current flow. Never mutated, always recomputed."""

    seats_subtotal: int = 0
    addons_total: int = 0
    discount: int = 0
    tax: int = 0
    total: int = 0
    seat_quotes: tuple[SeatQuote, ...] = attrs.field(default=(), converter=tuple)
    addon_lines: tuple[AddonLine, ...] = attrs.field(default=(), converter=tuple)
    coupon: Optional[CouponEvaluation] = None

    @property
    def pre_discount(self) -> int:
        return self.seats_subtotal + self.addons_total

    def fingerprint(self) -> bytes:
        """Canonical bytes of everything that is charged; equal bytes mean identical intent."""
        return orjson.dumps(attrs.asdict(self), option=orjson.OPT_SORT_KEYS)


EMPTY_BREAKDOWN = PriceBreakdown()
