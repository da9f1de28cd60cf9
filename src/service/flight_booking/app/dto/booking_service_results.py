"""Results returned by the booking service client, already normalized."""

from datetime import datetime
from typing import Any, Optional

import attrs


@attrs.define(frozen=True)
class HoldConfirmation:
    ok: bool
    hold_until: Optional[datetime] = None
    message: Optional[str] = None


@attrs.define(frozen=True)
class BookingCreated:
    booking: dict[str, Any]
    session_url: Optional[str] = None

    @property
    def booking_id(self) -> Optional[str]:
        for key in ('_id', 'id', 'bookingRef'):
            if value := self.booking.get(key):
                return str(value)
        return None

    @property
    def server_total(self) -> Optional[int]:
        price = self.booking.get('price')
        if isinstance(price, dict) and isinstance(price.get('amount'), int | float):
            return int(price['amount'])
        return None


@attrs.define(frozen=True)
class PaymentSession:
    url: Optional[str] = None
    session_id: Optional[str] = None
