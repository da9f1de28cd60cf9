"""
Lease Controller

Owns the seat selection and the seat hold of one booking flow.

- Selection is local and unconfirmed until `request_hold` succeeds.
- A hold is authoritative over seat-map snapshots for the seats it covers.
- Expiry is detected by `tick(now)`, which re-derives the remaining time from
  `hold_until` on every call, so missed ticks cannot drift the countdown.
"""

from datetime import datetime, timedelta
import math
from typing import Callable, Optional

import anyio
from anyio.abc import TaskGroup
import attrs
from opentelemetry import trace

from src.platform.exception.exceptions import (
    HoldExpired,
    HoldFailed,
    PreconditionFailure,
    RemoteServiceError,
    SeatRestricted,
)
from src.platform.logging.loguru_io import Logger
from src.service.flight_booking.app.interface.i_booking_service_client import (
    IBookingServiceClient,
)
from src.service.flight_booking.app.seat_inventory_model import SeatInventoryModel
from src.service.flight_booking.domain import eligibility_domain
from src.service.flight_booking.domain.booking_flow import BookingFlow, blank_passengers
from src.service.flight_booking.domain.clock import Clock, utc_now
from src.service.flight_booking.domain.entity.hold_entity import Hold
from src.service.flight_booking.domain.entity.passenger_entity import Passenger
from src.service.flight_booking.domain.entity.seat_entity import SeatMap
from src.service.flight_booking.domain.enum.flow_state import FlowEvent, FlowState


RESTRICTED_SEAT_NOTICE = (
    'Seat {seat_id} is in an exit or extra-legroom row and cannot be assigned to '
    'children or passengers needing assistance'
)


class LeaseController:
    def __init__(
        self,
        *,
        flow: BookingFlow,
        inventory: SeatInventoryModel,
        client: IBookingServiceClient,
        hold_ttl_minutes: int = 10,
        tick_seconds: float = 1.0,
        max_passengers: int = 6,
        exit_row_detection: bool = True,
        clock: Clock = utc_now,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self.flow = flow
        self.inventory = inventory
        self.client = client
        self.hold_ttl_minutes = hold_ttl_minutes
        self.tick_seconds = tick_seconds
        self.max_passengers = max_passengers
        self.exit_row_detection = exit_row_detection
        self.clock = clock
        self.on_change = on_change
        self.tracer = trace.get_tracer(__name__)
        inventory.add_listener(self.on_snapshot)

    # ---------- selection ----------

    def restricted_seat_ids(self) -> frozenset[str]:
        seat_map = self.inventory.seat_map
        if seat_map is None:
            return frozenset()
        return eligibility_domain.restricted_seat_ids(
            seat_map, self.flow.passengers, exit_row_detection=self.exit_row_detection
        )

    def toggle(self, seat_id: str) -> tuple[str, ...]:
        """
        Add or remove a seat from the selection.

        Silently ignored while seats are held, and for seats that are booked,
        held by someone else, unknown, or beyond the passenger count.

        Raises:
            SeatRestricted: The passenger composition may not occupy this seat
        """
        flow = self.flow
        if flow.hold is not None or flow.state != FlowState.SEAT_SELECTION:
            return flow.selection

        if seat_id in flow.selection:
            flow.selection = tuple(s for s in flow.selection if s != seat_id)
            return flow.selection

        seat_map = self.inventory.seat_map
        seat = seat_map.get(seat_id) if seat_map is not None else None
        if seat is None or not seat.is_selectable_by(flow.holder_id):
            return flow.selection
        if len(flow.selection) >= flow.max_selectable:
            return flow.selection

        if seat_id in self.restricted_seat_ids():
            notice = RESTRICTED_SEAT_NOTICE.format(seat_id=seat_id)
            flow.restriction_notice = notice
            raise SeatRestricted(notice, seat_id=seat_id)

        flow.selection = flow.selection + (seat_id,)
        flow.restriction_notice = None
        return flow.selection

    def set_passenger_count(self, count: int) -> None:
        """
        Resize the passenger list; the selection may not exceed it.

        Raises:
            PreconditionFailure: Seats are held, or count is out of range
        """
        flow = self.flow
        if flow.hold is not None:
            raise PreconditionFailure('Passenger count cannot change while seats are held')
        if not 1 <= count <= self.max_passengers:
            raise PreconditionFailure(f'Passenger count must be between 1 and {self.max_passengers}')

        current = flow.passengers[:count]
        flow.passengers = current + blank_passengers(count - len(current))
        flow.max_selectable = count
        flow.selection = flow.selection[:count]
        self.reconcile_restrictions()

    def update_passenger(self, index: int, passenger: Passenger) -> None:
        flow = self.flow
        if not 0 <= index < len(flow.passengers):
            raise PreconditionFailure(f'No passenger at position {index + 1}')
        if flow.hold is not None and index < len(flow.hold.seats):
            passenger = attrs.evolve(passenger, seat_id=flow.hold.seats[index])
        passengers = list(flow.passengers)
        passengers[index] = passenger
        flow.passengers = tuple(passengers)
        self.reconcile_restrictions()

    def reconcile_restrictions(self) -> list[str]:
        """
        Drop selected seats the current passengers may not occupy.

        If a dropped seat was already held, the local hold no longer matches the
        selection, so it is released locally and the flow returns to seat
        selection. The server-side hold is left to lapse by TTL.
        """
        flow = self.flow
        restricted = self.restricted_seat_ids()
        dropped = [seat_id for seat_id in flow.selection if seat_id in restricted]
        if not dropped:
            return []

        flow.selection = tuple(s for s in flow.selection if s not in restricted)
        notice = RESTRICTED_SEAT_NOTICE.format(seat_id=', '.join(dropped))
        flow.restriction_notice = notice
        Logger.base.warning(f'⚠️ [LEASE] Removed restricted seats {dropped} from selection')

        if flow.hold is not None:
            flow.hold = None
            flow.passengers = tuple(attrs.evolve(p, seat_id=None) for p in flow.passengers)
            if flow.is_holding:
                flow.apply(FlowEvent.HOLD_LOST)
            flow.last_error = SeatRestricted(notice, seat_id=dropped[0])
            Logger.base.warning('⚠️ [LEASE] Local hold dropped: held seats became restricted')
        return dropped

    def on_snapshot(self, seat_map: SeatMap, stale: bool) -> None:
        """Prune selected seats that the new snapshot shows as taken."""
        flow = self.flow
        if stale:
            Logger.base.info('🔄 [LEASE] Stale snapshot, selection left untouched')
        elif flow.hold is None:
            kept = tuple(
                seat_id
                for seat_id in flow.selection
                if (seat := seat_map.get(seat_id)) is not None
                and seat.is_selectable_by(flow.holder_id)
            )
            if kept != flow.selection:
                lost = [s for s in flow.selection if s not in kept]
                Logger.base.warning(f'⚠️ [LEASE] Seats {lost} were taken, removed from selection')
                flow.selection = kept
            self.reconcile_restrictions()
        else:
            # Held seats are ours whatever the snapshot says
            self.reconcile_restrictions()
        self._notify()

    # ---------- hold ----------

    async def request_hold(self, ttl_minutes: Optional[int] = None) -> Hold:
        """
        Ask the booking service to hold exactly the selected seats.

        Raises:
            PreconditionFailure: Wrong state or seat count, or missing flight context
            HoldFailed: The service refused; its message is passed through unchanged
        """
        flow = self.flow
        if flow.state != FlowState.SEAT_SELECTION or flow.hold is not None:
            raise PreconditionFailure('Seats are already held')
        if len(flow.selection) != flow.max_selectable:
            raise PreconditionFailure(f'Select exactly {flow.max_selectable} seat(s)')
        if not (flow.travel_date and flow.origin and flow.destination):
            raise PreconditionFailure('Flight date and route are required to hold seats')

        ttl = ttl_minutes or self.hold_ttl_minutes
        seat_ids = list(flow.selection)
        self.inventory.mark_hold_requested()

        with self.tracer.start_as_current_span(
            'lease.request_hold',
            attributes={
                'flight.id': flow.flight_id,
                'hold.seats': seat_ids,
                'hold.ttl_minutes': ttl,
            },
        ):
            try:
                confirmation = await self.client.request_hold(
                    flight_id=flow.flight_id,
                    seat_ids=seat_ids,
                    ttl_minutes=ttl,
                    holder_id=flow.holder_id,
                    travel_date=flow.travel_date,
                    origin=flow.origin,
                    destination=flow.destination,
                )
            except RemoteServiceError as e:
                flow.last_error = HoldFailed(e.message)
                Logger.base.error(f'❌ [LEASE] Hold request failed for {seat_ids}: {e.message}')
                raise flow.last_error from e
            except HoldFailed as e:
                flow.last_error = e
                Logger.base.warning(f'⚠️ [LEASE] Hold refused for {seat_ids}: {e.message}')
                raise

            if not confirmation.ok:
                flow.last_error = HoldFailed(confirmation.message or 'Hold failed')
                Logger.base.warning(f'⚠️ [LEASE] Hold refused for {seat_ids}: {flow.last_error.message}')
                raise flow.last_error

            hold_until = confirmation.hold_until or self.clock() + timedelta(minutes=ttl)
            hold = Hold(seats=tuple(seat_ids), hold_until=hold_until, ok=True)

        flow.hold = hold
        flow.apply(FlowEvent.HOLD_CONFIRMED)
        flow.last_error = None
        flow.passengers = tuple(
            attrs.evolve(passenger, seat_id=seat_ids[i] if i < len(seat_ids) else None)
            for i, passenger in enumerate(flow.passengers)
        )
        Logger.base.info(
            f'✅ [LEASE] Held {seat_ids} for {flow.holder_id} until {hold_until.isoformat()}'
        )
        return hold

    def remaining_ms(self, now: Optional[datetime] = None) -> int:
        if self.flow.hold is None:
            return 0
        return self.flow.hold.remaining_ms(now or self.clock())

    @staticmethod
    def format_remaining(ms: int) -> str:
        """MM:SS, or whole minutes once an hour or more is left."""
        if ms <= 0:
            return '00:00'
        seconds = ms // 1000
        if seconds >= 3600:
            return f'{math.ceil(seconds / 60)} min'
        return f'{seconds // 60:02d}:{seconds % 60:02d}'

    def tick(self, now: Optional[datetime] = None) -> Optional[int]:
        """
        Check the hold against `now`; expire it locally when time is up.

        Returns the remaining milliseconds, or None when nothing is held.
        While a submission is in flight the service decides, so expiry waits.
        """
        flow = self.flow
        if flow.hold is None:
            return None
        remaining = flow.hold.remaining_ms(now or self.clock())
        if remaining > 0 or flow.state == FlowState.SUBMITTING:
            return remaining
        self.expire_hold()
        return 0

    def expire_hold(self) -> None:
        flow = self.flow
        seats = list(flow.hold.seats) if flow.hold else []
        flow.hold = None
        flow.selection = ()
        flow.passengers = blank_passengers(len(flow.passengers))
        if flow.is_holding:
            flow.apply(FlowEvent.HOLD_LOST)
        flow.last_error = HoldExpired()
        Logger.base.warning(f'⏰ [LEASE] Hold on {seats} expired, back to seat selection')
        self._notify()

    async def start(self, *, task_group: TaskGroup) -> None:
        """Start the countdown loop"""
        task_group.start_soon(self._countdown_loop)  # type: ignore[arg-type]
        Logger.base.info(f'⏱️ [LEASE] Countdown started, tick every {self.tick_seconds}s')

    async def _countdown_loop(self) -> None:
        while True:
            self.tick()
            await anyio.sleep(self.tick_seconds)

    def release_local(self) -> None:
        """Forget the hold and selection without touching the service."""
        self.flow.hold = None
        self.flow.selection = ()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
