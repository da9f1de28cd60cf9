from datetime import datetime
from typing import Optional

import attrs

from src.service.flight_booking.domain.enum.coupon_rejection_reason import CouponRejectionReason


@attrs.define(frozen=True)
class Coupon:
    """Catalog coupon. Either percent-based (optionally capped) or a fixed amount."""

    id: str
    code: str
    title: str = ''
    percent: Optional[float] = None
    fixed_amount: Optional[int] = None
    cap: Optional[int] = None
    min_fare: Optional[int] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    active: bool = True

    def matches(self, code: str) -> bool:
        wanted = code.strip().lower()
        return bool(wanted) and wanted in {self.code.lower(), self.title.lower()}


@attrs.define(frozen=True)
class CouponEvaluation:
    code: str
    applied: bool
    amount: int = 0
    reason: Optional[CouponRejectionReason] = None

    @property
    def reason_text(self) -> str:
        return 'Applied' if self.applied else (self.reason.human if self.reason else '')
