"""
Fare Calculator

`recompute_price` turns the current flow inputs into a PriceBreakdown. It is
called explicitly after every mutation; nothing is tracked implicitly.
"""

from datetime import datetime, timezone
from typing import Mapping, Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.service.flight_booking.domain import discount_engine, fare_rules
from src.service.flight_booking.domain.entity.passenger_entity import Passenger
from src.service.flight_booking.domain.entity.seat_entity import SeatMap
from src.service.flight_booking.domain.enum.passenger_type import PassengerType
from src.service.flight_booking.domain.value_object.addon import Addon, AddonSelection
from src.service.flight_booking.domain.value_object.coupon import Coupon, CouponEvaluation
from src.service.flight_booking.domain.value_object.price_breakdown import (
    EMPTY_BREAKDOWN,
    PriceBreakdown,
    SeatQuote,
)


@attrs.define(frozen=True)
class FareConfig:
    tax_rate: float = 0.05
    child_discount_rate: float = fare_rules.CHILD_DISCOUNT_RATE
    assistance_discount_rate: float = fare_rules.ASSISTANCE_DISCOUNT_RATE


@attrs.define(frozen=True)
class PricingInputs:
    seat_map: Optional[SeatMap]
    selection: tuple[str, ...]
    passengers: tuple[Passenger, ...]
    addon_selections: tuple[AddonSelection, ...] = ()
    addon_catalog: Mapping[str, Addon] = attrs.field(factory=dict)
    coupon: Optional[Coupon] = None
    fallback_base_fare: Optional[int] = None
    now: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))


def quote_seats(inputs: PricingInputs, config: FareConfig) -> list[SeatQuote]:
    """Price each selected seat against the passenger at the same index."""
    if inputs.seat_map is None:
        return []
    base_fare = inputs.seat_map.resolve_base_price(inputs.fallback_base_fare)
    quotes = []
    for index, seat_id in enumerate(inputs.selection):
        seat = inputs.seat_map.get(seat_id)
        if seat is None:
            # Seat vanished from the latest snapshot; it cannot be priced
            Logger.base.warning(f'⚠️ [FARE] Selected seat {seat_id} missing from seat map')
            continue
        passenger = inputs.passengers[index] if index < len(inputs.passengers) else None
        undiscounted = fare_rules.seat_price(seat, base_fare)
        final = fare_rules.discounted_seat_price(
            undiscounted,
            passenger,
            child_rate=config.child_discount_rate,
            assistance_rate=config.assistance_discount_rate,
        )
        quotes.append(
            SeatQuote(
                seat_id=seat.seat_id,
                seat_class=seat.seat_class,
                price_modifier=seat.price_modifier,
                base_price=max(0, fare_rules.round_half_up(undiscounted)),
                final_price=max(0, fare_rules.round_half_up(final)),
                passenger_type=passenger.passenger_type if passenger else PassengerType.ADULT,
                assistance=passenger.needs_assistance if passenger else False,
            )
        )
    return quotes


@Logger.io
def recompute_price(inputs: PricingInputs, config: FareConfig = FareConfig()) -> PriceBreakdown:
    if not inputs.selection:
        return EMPTY_BREAKDOWN

    seat_quotes = quote_seats(inputs, config)
    seats_subtotal = sum(quote.final_price for quote in seat_quotes)

    seat_count = len(inputs.passengers) or len(inputs.selection)
    lines = discount_engine.addon_lines(
        inputs.addon_selections, inputs.addon_catalog, seat_count=seat_count, now=inputs.now
    )
    addons_total = discount_engine.addons_total(
        inputs.addon_selections, inputs.addon_catalog, seat_count=seat_count, now=inputs.now
    )
    pre_discount = seats_subtotal + addons_total

    coupon_evaluation: Optional[CouponEvaluation] = None
    discount = 0
    if inputs.coupon is not None:
        # Re-evaluated on every change: a coupon whose min fare is no longer met stops applying
        coupon_evaluation = discount_engine.evaluate_coupon(
            inputs.coupon, pre_discount=pre_discount, now=inputs.now
        )
        discount = coupon_evaluation.amount if coupon_evaluation.applied else 0

    taxable = max(0, pre_discount - discount)
    tax = fare_rules.round_half_up(taxable * config.tax_rate)
    raw_total = pre_discount - discount + tax

    if raw_total <= 0:
        Logger.base.error(
            f'❌ [FARE] Non-positive total {raw_total} for seats {list(inputs.selection)} '
            f'(subtotal={seats_subtotal}, addons={addons_total}, discount={discount}, tax={tax})'
        )

    return PriceBreakdown(
        seats_subtotal=seats_subtotal,
        addons_total=addons_total,
        discount=discount,
        tax=tax,
        total=max(0, fare_rules.round_half_up(raw_total)),
        seat_quotes=seat_quotes,
        addon_lines=lines,
        coupon=coupon_evaluation,
    )
