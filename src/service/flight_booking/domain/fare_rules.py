"""
Fare Rules

Pure per-seat pricing. No state, no I/O.

All amounts are whole major currency units. Rounding is half-up (2.5 -> 3),
never banker's rounding, so the client agrees with the booking service.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from src.service.flight_booking.domain.entity.passenger_entity import Passenger
from src.service.flight_booking.domain.entity.seat_entity import Seat


CHILD_DISCOUNT_RATE = 0.25
ASSISTANCE_DISCOUNT_RATE = 0.30


def round_half_up(value: float | int) -> int:
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def seat_price(seat: Seat, base_fare: int) -> float:
    """Absolute seat price wins over the modifier, whatever the modifier's sign."""
    if seat.has_absolute_price:
        return seat.absolute_price  # type: ignore[return-value]
    return base_fare + (seat.price_modifier or 0)


def passenger_discount_rate(
    passenger: Optional[Passenger],
    *,
    child_rate: float = CHILD_DISCOUNT_RATE,
    assistance_rate: float = ASSISTANCE_DISCOUNT_RATE,
) -> float:
    """Largest applicable passenger discount; discounts never stack."""
    if passenger is None:
        return 0.0
    rates = [0.0]
    if passenger.is_child:
        rates.append(child_rate)
    if passenger.needs_assistance:
        rates.append(assistance_rate)
    return max(rates)


def discounted_seat_price(
    price: float,
    passenger: Optional[Passenger],
    *,
    child_rate: float = CHILD_DISCOUNT_RATE,
    assistance_rate: float = ASSISTANCE_DISCOUNT_RATE,
) -> float | int:
    rate = passenger_discount_rate(
        passenger, child_rate=child_rate, assistance_rate=assistance_rate
    )
    if not rate:
        return price
    return max(0, round_half_up(price * (1 - rate)))
