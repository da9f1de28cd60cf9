from datetime import datetime
from typing import Optional

import attrs


@attrs.define(frozen=True)
class Addon:
    """Catalog add-on (meal, baggage, insurance...). Read-only to the engine."""

    id: str
    amount: float
    per_seat: bool = False
    title: str = ''
    category: Optional[str] = None
    currency: Optional[str] = None
    active: bool = True
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None

    def is_valid_at(self, now: datetime) -> bool:
        if not self.active:
            return False
        if self.valid_from is not None and now < self.valid_from:
            return False
        if self.valid_to is not None and now > self.valid_to:
            return False
        return True


@attrs.define(frozen=True)
class AddonSelection:
    addon_id: str
    qty: int = attrs.field(default=1, converter=lambda v: max(1, int(v or 1)))
