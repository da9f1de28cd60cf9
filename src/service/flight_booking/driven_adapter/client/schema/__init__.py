"""Wire schemas of the booking service responses"""

from src.service.flight_booking.driven_adapter.client.schema.catalog_schema import (
    AddonPayload,
    CouponPayload,
)
from src.service.flight_booking.driven_adapter.client.schema.seat_map_schema import (
    SeatMapPayload,
    SeatPayload,
)

__all__ = [
    'AddonPayload',
    'CouponPayload',
    'SeatMapPayload',
    'SeatPayload',
]
