from enum import StrEnum


class CouponRejectionReason(StrEnum):
    NOT_FOUND = 'not-found'
    INACTIVE = 'inactive'
    NOT_STARTED = 'not-started'
    EXPIRED = 'expired'
    MIN_FARE_NOT_MET = 'min-fare-not-met'

    @property
    def human(self) -> str:
        return _HUMAN[self]


_HUMAN = {
    CouponRejectionReason.NOT_FOUND: 'Coupon not found',
    CouponRejectionReason.INACTIVE: 'Coupon inactive',
    CouponRejectionReason.NOT_STARTED: 'Not active yet',
    CouponRejectionReason.EXPIRED: 'Expired',
    CouponRejectionReason.MIN_FARE_NOT_MET: 'Minimum fare not met',
}
