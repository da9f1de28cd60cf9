"""
Booking Service Client Interface

The remote booking/inventory/payment service, seen from the client engine.
The service is authoritative for seat status, holds and final charges.
"""

from abc import ABC, abstractmethod
from typing import Any, List

from src.service.flight_booking.app.dto.booking_service_results import (
    BookingCreated,
    HoldConfirmation,
    PaymentSession,
)
from src.service.flight_booking.domain.entity.seat_entity import SeatMap
from src.service.flight_booking.domain.value_object.addon import Addon
from src.service.flight_booking.domain.value_object.coupon import Coupon


class IBookingServiceClient(ABC):
    @abstractmethod
    async def fetch_seat_map(
        self, *, flight_id: str, travel_date: str, origin: str, destination: str
    ) -> SeatMap:
        """
        Fetch the current seat map snapshot

        Raises:
            InventoryUnavailable: No seat map exists for this flight (404)
            RemoteServiceError: Transient failure, retry later
        """
        pass

    @abstractmethod
    async def request_hold(
        self,
        *,
        flight_id: str,
        seat_ids: List[str],
        ttl_minutes: int,
        holder_id: str,
        travel_date: str,
        origin: str,
        destination: str,
    ) -> HoldConfirmation:
        """
        Ask the service to hold seats for holder_id

        Raises:
            HoldFailed: Service refused the hold (message is the service's own)
            RemoteServiceError: Transient failure
        """
        pass

    @abstractmethod
    async def create_booking(
        self, *, payload: dict[str, Any], idempotency_key: str
    ) -> BookingCreated:
        """
        Raises:
            SubmissionFailed: Service rejected the booking
        """
        pass

    @abstractmethod
    async def create_payment_session(
        self, *, booking_id: str, amount: int, currency: str, idempotency_key: str
    ) -> PaymentSession:
        """
        Raises:
            PriceMismatch: Service computed a different amount
            SubmissionFailed: Any other rejection
        """
        pass

    @abstractmethod
    async def fetch_addons(self) -> List[Addon]:
        pass

    @abstractmethod
    async def fetch_coupons(self) -> List[Coupon]:
        pass
