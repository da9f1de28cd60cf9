"""
Seat Inventory Model

Holds the latest seat map snapshot for one flight/date/route and refreshes it
from the booking service, on demand and every SEAT_MAP_REFRESH_INTERVAL_SECONDS.

A snapshot is always replaced wholesale. Listeners are told whether the
snapshot is stale, i.e. a hold was requested while the fetch was in flight;
such a snapshot may still show our own held seats as available.
"""

from typing import Callable, List, Optional

import anyio
from anyio.abc import TaskGroup
from opentelemetry import trace

from src.platform.exception.exceptions import (
    InventoryUnavailable,
    PreconditionFailure,
    RemoteServiceError,
)
from src.platform.logging.loguru_io import Logger
from src.service.flight_booking.app.interface.i_booking_service_client import (
    IBookingServiceClient,
)
from src.service.flight_booking.domain.entity.seat_entity import SeatMap


SnapshotListener = Callable[[SeatMap, bool], None]


class SeatInventoryModel:
    def __init__(
        self,
        *,
        client: IBookingServiceClient,
        refresh_interval_seconds: float = 600,
    ) -> None:
        self.client = client
        self.refresh_interval_seconds = refresh_interval_seconds
        self.seat_map: Optional[SeatMap] = None
        self.unavailable: bool = False  # Terminal: the service has no map for this flight
        self.last_error: Optional[str] = None
        self._listeners: List[SnapshotListener] = []
        self._hold_generation = 0
        self.tracer = trace.get_tracer(__name__)

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def mark_hold_requested(self) -> None:
        """Called before each hold request; fetches already in flight become stale."""
        self._hold_generation += 1

    @staticmethod
    def _require_context(
        *,
        flight_id: Optional[str],
        travel_date: Optional[str],
        origin: Optional[str],
        destination: Optional[str],
    ) -> None:
        missing = [
            name
            for name, value in (
                ('flight', flight_id),
                ('travel date', travel_date),
                ('origin', origin),
                ('destination', destination),
            )
            if not value
        ]
        if missing:
            raise PreconditionFailure(f'Seat map needs {", ".join(missing)}')

    @Logger.io
    async def refresh(
        self,
        *,
        flight_id: Optional[str],
        travel_date: Optional[str],
        origin: Optional[str],
        destination: Optional[str],
    ) -> SeatMap:
        """
        Fetch and install a new snapshot.

        Raises:
            PreconditionFailure: Flight context incomplete, nothing was fetched
            InventoryUnavailable: No seat map for this flight, the model goes terminal
            RemoteServiceError: Transient failure, the previous snapshot is kept
        """
        self._require_context(
            flight_id=flight_id, travel_date=travel_date, origin=origin, destination=destination
        )

        with self.tracer.start_as_current_span(
            'inventory.refresh_seat_map',
            attributes={'flight.id': str(flight_id), 'flight.travel_date': str(travel_date)},
        ):
            generation = self._hold_generation
            try:
                seat_map = await self.client.fetch_seat_map(
                    flight_id=flight_id,  # type: ignore[arg-type]
                    travel_date=travel_date,  # type: ignore[arg-type]
                    origin=origin,  # type: ignore[arg-type]
                    destination=destination,  # type: ignore[arg-type]
                )
            except InventoryUnavailable as e:
                self.seat_map = None
                self.unavailable = True
                self.last_error = e.message
                Logger.base.warning(f'🚫 [SEAT_MAP] No seat map for flight {flight_id}: {e.message}')
                raise
            except RemoteServiceError as e:
                self.last_error = e.message
                Logger.base.warning(
                    f'⚠️ [SEAT_MAP] Refresh failed for flight {flight_id}, keeping previous snapshot: {e.message}'
                )
                raise

            stale = generation != self._hold_generation
            self.seat_map = seat_map
            self.unavailable = False
            self.last_error = None
            Logger.base.info(
                f'✅ [SEAT_MAP] Loaded {len(seat_map.seats)} seats for flight {flight_id}'
                f'{" (stale: hold requested during fetch)" if stale else ""}'
            )

        for listener in self._listeners:
            listener(seat_map, stale)
        return seat_map

    async def start(
        self,
        *,
        task_group: TaskGroup,
        flight_id: Optional[str],
        travel_date: Optional[str],
        origin: Optional[str],
        destination: Optional[str],
    ) -> None:
        """Start the periodic refresh loop"""
        task_group.start_soon(  # type: ignore[arg-type]
            self._refresh_loop, flight_id, travel_date, origin, destination
        )
        Logger.base.info(
            f'🔄 [SEAT_MAP] Periodic refresh every {self.refresh_interval_seconds}s for flight {flight_id}'
        )

    async def _refresh_loop(
        self,
        flight_id: Optional[str],
        travel_date: Optional[str],
        origin: Optional[str],
        destination: Optional[str],
    ) -> None:
        while True:
            await anyio.sleep(self.refresh_interval_seconds)
            try:
                await self.refresh(
                    flight_id=flight_id,
                    travel_date=travel_date,
                    origin=origin,
                    destination=destination,
                )
            except RemoteServiceError:
                continue
            except (InventoryUnavailable, PreconditionFailure):
                Logger.base.info(f'⏹️ [SEAT_MAP] Periodic refresh stopped for flight {flight_id}')
                return
