"""
Booking Flow Coordinator

Single entry point for a UI shell. Every mutating operation goes through here
and is followed by an explicit `recompute`, so the price breakdown is always
derived from the current inputs.

Background work (seat map refresh, hold countdown) runs in an anyio task group
owned by the coordinator; `async with coordinator:` starts it and leaving the
block cancels both loops.
"""

from typing import Any, Dict, List, Optional

import anyio
from anyio.abc import TaskGroup
import attrs

from src.platform.exception.exceptions import (
    CustomBaseError,
    HoldLost,
    PreconditionFailure,
    PriceMismatch,
    SubmissionFailed,
)
from src.platform.logging.loguru_io import Logger
from src.service.flight_booking.app.command.checkout_use_case import CheckoutUseCase
from src.service.flight_booking.app.dto.checkout_outcome import CheckoutOutcome, CheckoutStatus
from src.service.flight_booking.app.interface.i_booking_service_client import (
    IBookingServiceClient,
)
from src.service.flight_booking.app.lease_controller import LeaseController
from src.service.flight_booking.app.seat_inventory_model import SeatInventoryModel
from src.service.flight_booking.domain import discount_engine
from src.service.flight_booking.domain.booking_flow import BookingFlow, blank_passengers
from src.service.flight_booking.domain.clock import Clock, utc_now
from src.service.flight_booking.domain.entity.hold_entity import Hold
from src.service.flight_booking.domain.entity.passenger_entity import (
    Contact,
    Passenger,
    SpecialAssistance,
)
from src.service.flight_booking.domain.enum.flow_state import FlowEvent, FlowState
from src.service.flight_booking.domain.fare_calculator import (
    FareConfig,
    PricingInputs,
    recompute_price,
)
from src.service.flight_booking.domain.value_object.addon import Addon, AddonSelection
from src.service.flight_booking.domain.value_object.coupon import Coupon, CouponEvaluation
from src.service.flight_booking.domain.value_object.price_breakdown import PriceBreakdown


class BookingFlowCoordinator:
    def __init__(
        self,
        *,
        flow: BookingFlow,
        client: IBookingServiceClient,
        inventory: SeatInventoryModel,
        lease: LeaseController,
        checkout: CheckoutUseCase,
        fare_config: FareConfig = FareConfig(),
        clock: Clock = utc_now,
    ) -> None:
        self.flow = flow
        self.client = client
        self.inventory = inventory
        self.lease = lease
        self.checkout = checkout
        self.fare_config = fare_config
        self.clock = clock
        self.addon_catalog: Dict[str, Addon] = {}
        self.coupons: List[Coupon] = []
        self._task_group: Optional[TaskGroup] = None
        lease.on_change = self.recompute

    # ---------- lifecycle ----------

    async def __aenter__(self) -> 'BookingFlowCoordinator':
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        try:
            await self.start(task_group=task_group)
        except BaseException:
            # Leave the task group before propagating so no loop outlives a failed start
            self._task_group = None
            task_group.cancel_scope.cancel()
            await task_group.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(self, *exc_info: Any) -> Optional[bool]:
        task_group, self._task_group = self._task_group, None
        if task_group is None:
            return None
        task_group.cancel_scope.cancel()
        Logger.base.info(f'🛑 [FLOW] Background tasks cancelled for flight {self.flow.flight_id}')
        return await task_group.__aexit__(*exc_info)

    async def start(self, *, task_group: TaskGroup) -> None:
        """Load catalog and first snapshot, then start refresh and countdown loops"""
        await self.load_catalog()
        try:
            await self.refresh_seat_map()
        except CustomBaseError as e:
            # Surfaced through flow.last_error; the refresh loop decides whether to retry
            self.flow.last_error = e
        await self.inventory.start(
            task_group=task_group,
            flight_id=self.flow.flight_id,
            travel_date=self.flow.travel_date,
            origin=self.flow.origin,
            destination=self.flow.destination,
        )
        await self.lease.start(task_group=task_group)

    # ---------- catalog / inventory ----------

    async def load_catalog(self) -> None:
        """Fetch add-ons and coupons; a failed list is treated as empty."""
        addons: List[Addon] = []
        coupons: List[Coupon] = []

        async def _load_addons() -> None:
            nonlocal addons
            try:
                addons = await self.client.fetch_addons()
            except CustomBaseError as e:
                Logger.base.warning(f'⚠️ [CATALOG] Add-ons unavailable: {e.message}')

        async def _load_coupons() -> None:
            nonlocal coupons
            try:
                coupons = await self.client.fetch_coupons()
            except CustomBaseError as e:
                Logger.base.warning(f'⚠️ [CATALOG] Coupons unavailable: {e.message}')

        async with anyio.create_task_group() as tg:
            tg.start_soon(_load_addons)
            tg.start_soon(_load_coupons)

        self.addon_catalog = {addon.id: addon for addon in addons}
        self.coupons = coupons
        Logger.base.info(f'📦 [CATALOG] {len(addons)} add-ons, {len(coupons)} coupons loaded')
        self.recompute()

    async def refresh_seat_map(self) -> None:
        flow = self.flow
        await self.inventory.refresh(
            flight_id=flow.flight_id,
            travel_date=flow.travel_date,
            origin=flow.origin,
            destination=flow.destination,
        )
        self.recompute()

    # ---------- pricing ----------

    def recompute(self) -> PriceBreakdown:
        flow = self.flow
        flow.price = recompute_price(
            PricingInputs(
                seat_map=self.inventory.seat_map,
                selection=flow.selection,
                passengers=flow.passengers,
                addon_selections=flow.addon_selections,
                addon_catalog=self.addon_catalog,
                coupon=flow.coupon,
                fallback_base_fare=flow.fallback_base_fare,
                now=self.clock(),
            ),
            self.fare_config,
        )
        return flow.price

    # ---------- seat selection ----------

    def toggle_seat(self, seat_id: str) -> PriceBreakdown:
        try:
            self.lease.toggle(seat_id)
        finally:
            self.recompute()
        return self.flow.price

    def set_passenger_count(self, count: int) -> PriceBreakdown:
        self.lease.set_passenger_count(count)
        return self.recompute()

    def update_passenger(self, index: int, **changes: Any) -> PriceBreakdown:
        if not 0 <= index < len(self.flow.passengers):
            raise PreconditionFailure(f'No passenger at position {index + 1}')
        if isinstance(changes.get('special_assistance'), bool):
            changes['special_assistance'] = SpecialAssistance(disabled=changes['special_assistance'])
        passenger: Passenger = attrs.evolve(self.flow.passengers[index], **changes)
        self.lease.update_passenger(index, passenger)
        return self.recompute()

    def set_contact(self, contact: Contact) -> PriceBreakdown:
        self.flow.contact = contact
        return self.recompute()

    # ---------- add-ons ----------

    def toggle_addon(self, addon_id: str) -> PriceBreakdown:
        flow = self.flow
        if any(s.addon_id == addon_id for s in flow.addon_selections):
            flow.addon_selections = tuple(s for s in flow.addon_selections if s.addon_id != addon_id)
        elif addon_id in self.addon_catalog:
            flow.addon_selections = flow.addon_selections + (AddonSelection(addon_id=addon_id),)
        return self.recompute()

    def set_addon_qty(self, addon_id: str, qty: int) -> PriceBreakdown:
        flow = self.flow
        others = tuple(s for s in flow.addon_selections if s.addon_id != addon_id)
        if qty <= 0 or addon_id not in self.addon_catalog:
            flow.addon_selections = others
        else:
            flow.addon_selections = others + (AddonSelection(addon_id=addon_id, qty=qty),)
        return self.recompute()

    # ---------- coupons ----------

    def apply_coupon(self, code: str) -> CouponEvaluation:
        """
        Raises:
            CouponRejected: Unknown code, or the coupon fails validation now.
                Any previously applied coupon stays applied.
        """
        coupon = discount_engine.find_coupon(code, self.coupons)
        pre_discount = self.recompute().pre_discount
        evaluation = discount_engine.validate_coupon(
            coupon, pre_discount=pre_discount, now=self.clock()
        )
        self.flow.coupon = coupon
        self.recompute()
        Logger.base.info(f'🏷️ [COUPON] Applied {coupon.code}: -{evaluation.amount}')
        return evaluation

    def remove_coupon(self) -> PriceBreakdown:
        self.flow.coupon = None
        return self.recompute()

    # ---------- hold / checkout ----------

    async def request_hold(self, ttl_minutes: Optional[int] = None) -> Hold:
        hold = await self.lease.request_hold(ttl_minutes)
        self.recompute()
        return hold

    def proceed_to_passenger_details(self) -> FlowState:
        hold = self.flow.hold
        if hold is None or not hold.is_live(self.clock()):
            raise PreconditionFailure('Hold your seats before entering passenger details')
        return self.flow.apply(FlowEvent.DETAILS_OPENED)

    def remaining_ms(self) -> int:
        return self.lease.remaining_ms()

    def countdown(self) -> str:
        return self.lease.format_remaining(self.lease.remaining_ms())

    async def submit(self) -> CheckoutOutcome:
        """
        Submit the held flow.

        Validation and precondition failures raise; outcomes of an attempted
        submission (completed, failed, hold lost) are returned.
        """
        self.recompute()
        try:
            return await self.checkout.execute(flow=self.flow)
        except HoldLost as e:
            return CheckoutOutcome(
                status=CheckoutStatus.HOLD_LOST, error=e.message, error_type=type(e).__name__
            )
        except (PriceMismatch, SubmissionFailed) as e:
            attempt = self.flow.attempt
            return CheckoutOutcome(
                status=CheckoutStatus.FAILED,
                idempotency_key=attempt.idempotency_key if attempt else None,
                error=e.message,
                error_type=type(e).__name__,
            )
        finally:
            # Completion and hold loss both clear the selection
            self.recompute()

    def reset(self) -> None:
        """Back to an empty seat selection for one passenger. A held seat lapses by TTL."""
        flow = self.flow
        self.lease.release_local()
        flow.apply(FlowEvent.RESET)
        flow.max_selectable = 1
        flow.passengers = blank_passengers(1)
        flow.contact = Contact()
        flow.addon_selections = ()
        flow.coupon = None
        flow.last_error = None
        flow.restriction_notice = None
        flow.attempt = None
        self.recompute()
