from enum import StrEnum
from typing import Any, Optional

import attrs


class CheckoutStatus(StrEnum):
    COMPLETED = 'completed'
    FAILED = 'failed'
    HOLD_LOST = 'hold_lost'


@attrs.define(frozen=True)
class CheckoutOutcome:
    """What the shell needs after a submission: where to go, or what went wrong."""

    status: CheckoutStatus
    idempotency_key: Optional[str] = None
    redirect_url: Optional[str] = None
    booking: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
