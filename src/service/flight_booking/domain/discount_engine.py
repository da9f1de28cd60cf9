"""
Discount Engine

Pure functions for add-on totals and coupon validation/discount, applied on
top of the seat subtotal.
"""

from datetime import datetime
from typing import Iterable, Mapping, Optional

from src.platform.exception.exceptions import CouponRejected
from src.service.flight_booking.domain.enum.coupon_rejection_reason import CouponRejectionReason
from src.service.flight_booking.domain.fare_rules import round_half_up
from src.service.flight_booking.domain.value_object.addon import Addon, AddonSelection
from src.service.flight_booking.domain.value_object.coupon import Coupon, CouponEvaluation
from src.service.flight_booking.domain.value_object.price_breakdown import AddonLine


def addon_lines(
    selections: Iterable[AddonSelection],
    catalog: Mapping[str, Addon],
    *,
    seat_count: int,
    now: datetime,
) -> list[AddonLine]:
    """
    Price each selected add-on.

    Selections whose add-on is missing from the catalog, or no longer valid,
    are left out rather than priced with a guessed amount.
    """
    lines = []
    for selection in selections:
        addon = catalog.get(selection.addon_id)
        if addon is None or not addon.is_valid_at(now):
            continue
        multiplier = seat_count if addon.per_seat else 1
        lines.append(
            AddonLine(
                addon_id=addon.id,
                title=addon.title,
                qty=selection.qty,
                per_seat=addon.per_seat,
                amount=round_half_up(addon.amount * multiplier * selection.qty),
            )
        )
    return lines


def addons_total(
    selections: Iterable[AddonSelection],
    catalog: Mapping[str, Addon],
    *,
    seat_count: int,
    now: datetime,
) -> int:
    # Round the sum, not each line, so fractional per-unit amounts add up exactly
    raw = 0.0
    for selection in selections:
        addon = catalog.get(selection.addon_id)
        if addon is None or not addon.is_valid_at(now):
            continue
        raw += addon.amount * (seat_count if addon.per_seat else 1) * selection.qty
    return round_half_up(raw)


def coupon_rejection_reason(
    coupon: Coupon, *, pre_discount: int, now: datetime
) -> Optional[CouponRejectionReason]:
    """First failing reason in fixed order, or None when the coupon applies."""
    if not coupon.active:
        return CouponRejectionReason.INACTIVE
    if coupon.valid_from is not None and now < coupon.valid_from:
        return CouponRejectionReason.NOT_STARTED
    if coupon.valid_to is not None and now > coupon.valid_to:
        return CouponRejectionReason.EXPIRED
    if coupon.min_fare is not None and pre_discount < coupon.min_fare:
        return CouponRejectionReason.MIN_FARE_NOT_MET
    return None


def coupon_discount(coupon: Coupon, *, pre_discount: int) -> int:
    if coupon.percent is not None and coupon.percent > 0:
        discount = round_half_up(pre_discount * coupon.percent / 100)
        if coupon.cap is not None and coupon.cap > 0:
            discount = min(discount, coupon.cap)
        return max(0, discount)
    if coupon.fixed_amount is not None and coupon.fixed_amount > 0:
        # A fixed coupon can wipe the fare out but never push it below zero
        return min(round_half_up(coupon.fixed_amount), max(0, pre_discount))
    return 0


def evaluate_coupon(coupon: Coupon, *, pre_discount: int, now: datetime) -> CouponEvaluation:
    reason = coupon_rejection_reason(coupon, pre_discount=pre_discount, now=now)
    if reason is not None:
        return CouponEvaluation(code=coupon.code, applied=False, amount=0, reason=reason)
    return CouponEvaluation(
        code=coupon.code,
        applied=True,
        amount=coupon_discount(coupon, pre_discount=pre_discount),
    )


def find_coupon(code: str, coupons: Iterable[Coupon]) -> Coupon:
    """Look a coupon up by code or title, case-insensitively."""
    if not code or not code.strip():
        raise CouponRejected('Enter a coupon code', reason=CouponRejectionReason.NOT_FOUND)
    for coupon in coupons:
        if coupon.matches(code):
            return coupon
    raise CouponRejected(
        CouponRejectionReason.NOT_FOUND.human, reason=CouponRejectionReason.NOT_FOUND
    )


def validate_coupon(coupon: Coupon, *, pre_discount: int, now: datetime) -> CouponEvaluation:
    """Evaluate at application time; raise with the specific reason on rejection."""
    evaluation = evaluate_coupon(coupon, pre_discount=pre_discount, now=now)
    if not evaluation.applied and evaluation.reason is not None:
        message = evaluation.reason.human
        if evaluation.reason == CouponRejectionReason.MIN_FARE_NOT_MET:
            message = f'{message}: requires a minimum fare of {coupon.min_fare}'
        raise CouponRejected(message, reason=evaluation.reason)
    return evaluation
