from datetime import date, datetime
import math
from typing import Optional

import attrs

from src.service.flight_booking.domain.enum.seat_class import SeatClass
from src.service.flight_booking.domain.enum.seat_status import SeatStatus


EXTRA_LEGROOM = 'extra_legroom'


@attrs.define(frozen=True)
class Seat:
    """
    One seat of a seat map, in canonical shape.

    Produced only by the payload normalizer; downstream code never probes
    alternative field names.
    """

    seat_id: str
    row: int
    col: int
    seat_class: SeatClass = SeatClass.ECONOMY
    status: SeatStatus = SeatStatus.AVAILABLE
    held_by: Optional[str] = None
    hold_expires_at: Optional[datetime] = None
    price_modifier: int = 0
    absolute_price: Optional[float] = None
    features: frozenset[str] = attrs.field(factory=frozenset, converter=frozenset)

    @property
    def has_absolute_price(self) -> bool:
        return self.absolute_price is not None and math.isfinite(self.absolute_price)

    @property
    def is_extra_legroom(self) -> bool:
        return EXTRA_LEGROOM in self.features

    def is_selectable_by(self, holder_id: str) -> bool:
        if self.status == SeatStatus.BOOKED:
            return False
        if self.status == SeatStatus.HELD:
            return self.held_by is None or self.held_by == holder_id
        return True


@attrs.define(frozen=True)
class SeatMap:
    """Snapshot of one flight/date/route seat inventory. Replaced wholesale on refresh."""

    flight_id: str
    travel_date: date
    origin: str
    destination: str
    rows: int
    cols: int
    seats: tuple[Seat, ...] = attrs.field(converter=tuple)
    base_price: Optional[int] = None
    aircraft: Optional[str] = None
    fetched_at: Optional[datetime] = None
    _index: dict[str, Seat] = attrs.field(init=False, repr=False, eq=False)

    def __attrs_post_init__(self) -> None:
        object.__setattr__(self, '_index', {seat.seat_id: seat for seat in self.seats})

    def get(self, seat_id: str) -> Optional[Seat]:
        return self._index.get(seat_id)

    def __contains__(self, seat_id: object) -> bool:
        return seat_id in self._index

    def resolve_base_price(self, fallback: Optional[int] = None) -> int:
        if self.base_price is not None:
            return self.base_price
        return fallback or 0
