from datetime import datetime

import attrs


@attrs.define(frozen=True)
class Hold:
    """Server-confirmed, time-boxed claim on a set of seats."""

    seats: tuple[str, ...] = attrs.field(converter=tuple)
    hold_until: datetime
    ok: bool = True

    def remaining_ms(self, now: datetime) -> int:
        return max(0, int((self.hold_until - now).total_seconds() * 1000))

    def is_live(self, now: datetime) -> bool:
        return self.ok and self.remaining_ms(now) > 0

    def covers_exactly(self, seat_ids: tuple[str, ...] | list[str]) -> bool:
        return len(self.seats) == len(seat_ids) and set(self.seats) == set(seat_ids)
