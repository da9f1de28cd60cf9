"""
Unit tests for the discount engine

Test Coverage:
1. Add-on totals (per-seat vs per-booking, qty, skipped entries, sum rounding)
2. Coupon rejection order: inactive -> not started -> expired -> min fare
3. Coupon discount (percent with cap, fixed amount)
4. Coupon lookup by code/title
"""

from datetime import timedelta

import pytest

from src.platform.exception.exceptions import CouponRejected
from src.service.flight_booking.domain import discount_engine
from src.service.flight_booking.domain.enum.coupon_rejection_reason import CouponRejectionReason
from src.service.flight_booking.domain.value_object.addon import Addon, AddonSelection
from src.service.flight_booking.domain.value_object.coupon import Coupon
from test.service.flight_booking.fixtures import NOW


pytestmark = pytest.mark.unit


CATALOG = {
    'meal': Addon(id='meal', amount=500, per_seat=True, title='Meal'),
    'bag': Addon(id='bag', amount=299.5, per_seat=False, title='Extra bag'),
    'lounge': Addon(id='lounge', amount=1500, active=False, title='Lounge'),
    'promo': Addon(id='promo', amount=100, valid_to=NOW - timedelta(days=1), title='Old promo'),
}


class TestAddonsTotal:
    def test_per_seat_and_per_booking_addons(self):
        # Given: a per-seat meal and two per-booking bags for 3 seats
        selections = [AddonSelection('meal'), AddonSelection('bag', qty=2)]

        # When
        total = discount_engine.addons_total(selections, CATALOG, seat_count=3, now=NOW)

        # Then: 500*3 + 299.5*2 = 2099
        assert total == 2099

    def test_missing_inactive_and_expired_addons_are_skipped(self):
        selections = [
            AddonSelection('unknown'),
            AddonSelection('lounge'),
            AddonSelection('promo'),
            AddonSelection('meal'),
        ]

        assert discount_engine.addons_total(selections, CATALOG, seat_count=1, now=NOW) == 500

    def test_sum_is_rounded_once(self):
        """Rounding each 0.5 line would give 2; rounding the sum gives 1"""
        catalog = {
            'a': Addon(id='a', amount=0.5),
            'b': Addon(id='b', amount=0.5),
        }
        selections = [AddonSelection('a'), AddonSelection('b')]

        assert discount_engine.addons_total(selections, catalog, seat_count=1, now=NOW) == 1

    def test_qty_below_one_is_treated_as_one(self):
        assert AddonSelection('meal', qty=0).qty == 1

    def test_addon_lines_describe_each_priced_addon(self):
        lines = discount_engine.addon_lines(
            [AddonSelection('meal'), AddonSelection('unknown')], CATALOG, seat_count=2, now=NOW
        )

        assert len(lines) == 1
        assert lines[0].addon_id == 'meal'
        assert lines[0].per_seat is True
        assert lines[0].amount == 1000


class TestCouponRejectionReason:
    def test_inactive_wins_over_expired(self):
        coupon = Coupon(id='c', code='OLD', active=False, valid_to=NOW - timedelta(days=1))

        reason = discount_engine.coupon_rejection_reason(coupon, pre_discount=10000, now=NOW)

        assert reason == CouponRejectionReason.INACTIVE

    def test_not_started(self):
        coupon = Coupon(id='c', code='SOON', percent=10, valid_from=NOW + timedelta(hours=1))

        reason = discount_engine.coupon_rejection_reason(coupon, pre_discount=10000, now=NOW)

        assert reason == CouponRejectionReason.NOT_STARTED

    def test_expired_wins_over_min_fare(self):
        coupon = Coupon(
            id='c', code='GONE', percent=10, min_fare=50000, valid_to=NOW - timedelta(seconds=1)
        )

        reason = discount_engine.coupon_rejection_reason(coupon, pre_discount=100, now=NOW)

        assert reason == CouponRejectionReason.EXPIRED

    def test_min_fare_not_met(self):
        coupon = Coupon(id='c', code='BIG', percent=10, min_fare=9000)

        reason = discount_engine.coupon_rejection_reason(coupon, pre_discount=8999, now=NOW)

        assert reason == CouponRejectionReason.MIN_FARE_NOT_MET

    def test_applies_when_every_check_passes(self):
        coupon = Coupon(id='c', code='OK', percent=10, min_fare=8000)

        assert discount_engine.coupon_rejection_reason(coupon, pre_discount=8000, now=NOW) is None


class TestCouponDiscount:
    def test_percent_discount_is_capped(self):
        coupon = Coupon(id='c', code='TEN', percent=10, cap=500)

        assert discount_engine.coupon_discount(coupon, pre_discount=8000) == 500

    def test_percent_discount_without_cap(self):
        coupon = Coupon(id='c', code='TEN', percent=10)

        assert discount_engine.coupon_discount(coupon, pre_discount=8000) == 800

    def test_fixed_discount_never_exceeds_fare(self):
        coupon = Coupon(id='c', code='FLAT', fixed_amount=1000)

        assert discount_engine.coupon_discount(coupon, pre_discount=700) == 700
        assert discount_engine.coupon_discount(coupon, pre_discount=7000) == 1000

    def test_rejected_coupon_evaluates_to_zero(self):
        coupon = Coupon(id='c', code='BIG', percent=10, min_fare=9000)

        evaluation = discount_engine.evaluate_coupon(coupon, pre_discount=8000, now=NOW)

        assert evaluation.applied is False
        assert evaluation.amount == 0
        assert evaluation.reason_text == 'Minimum fare not met'


class TestCouponLookup:
    COUPONS = [
        Coupon(id='1', code='SAVE10', title='Monsoon Sale', percent=10),
        Coupon(id='2', code='FLAT500', title='Flat 500', fixed_amount=500),
    ]

    def test_find_by_code_case_insensitive(self):
        assert discount_engine.find_coupon('save10', self.COUPONS).id == '1'

    def test_find_by_title(self):
        assert discount_engine.find_coupon('monsoon sale', self.COUPONS).id == '1'

    def test_empty_code_is_rejected(self):
        with pytest.raises(CouponRejected) as exc_info:
            discount_engine.find_coupon('  ', self.COUPONS)

        assert exc_info.value.message == 'Enter a coupon code'

    def test_unknown_code_is_not_found(self):
        with pytest.raises(CouponRejected) as exc_info:
            discount_engine.find_coupon('NOPE', self.COUPONS)

        assert exc_info.value.reason == CouponRejectionReason.NOT_FOUND

    def test_validate_reports_required_min_fare(self):
        coupon = Coupon(id='c', code='BIG', percent=10, min_fare=9000)

        with pytest.raises(CouponRejected) as exc_info:
            discount_engine.validate_coupon(coupon, pre_discount=8000, now=NOW)

        assert exc_info.value.reason == CouponRejectionReason.MIN_FARE_NOT_MET
        assert '9000' in exc_info.value.message
