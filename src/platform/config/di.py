"""
https://python-dependency-injector.ets-labs.org/index.html
"""

from typing import Optional

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.service.flight_booking.app.booking_flow_coordinator import BookingFlowCoordinator
from src.service.flight_booking.app.command.checkout_use_case import CheckoutUseCase
from src.service.flight_booking.app.lease_controller import LeaseController
from src.service.flight_booking.app.seat_inventory_model import SeatInventoryModel
from src.service.flight_booking.domain.booking_flow import BookingFlow
from src.service.flight_booking.domain.fare_calculator import FareConfig
from src.service.flight_booking.driven_adapter.client.booking_service_client_impl import (
    BookingServiceClientImpl,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Remote booking service (one shared HTTP connection pool)
    booking_service_client = providers.Singleton(
        BookingServiceClientImpl,
        base_url=config_service.provided.BOOKING_API_BASE_URL,
        token=config_service.provided.BOOKING_API_TOKEN.get_secret_value.call(),
        timeout=config_service.provided.BOOKING_API_TIMEOUT_SECONDS,
    )

    fare_config = providers.Singleton(
        FareConfig,
        tax_rate=config_service.provided.TAX_RATE,
        child_discount_rate=config_service.provided.CHILD_DISCOUNT_RATE,
        assistance_discount_rate=config_service.provided.ASSISTANCE_DISCOUNT_RATE,
    )

    # Per-flow components (Factory: one set per booking flow)
    seat_inventory_model = providers.Factory(
        SeatInventoryModel,
        client=booking_service_client,
        refresh_interval_seconds=config_service.provided.SEAT_MAP_REFRESH_INTERVAL_SECONDS,
    )
    lease_controller = providers.Factory(
        LeaseController,
        client=booking_service_client,
        hold_ttl_minutes=config_service.provided.HOLD_TTL_MINUTES,
        tick_seconds=config_service.provided.HOLD_COUNTDOWN_TICK_SECONDS,
        max_passengers=config_service.provided.MAX_PASSENGERS,
        exit_row_detection=config_service.provided.EXIT_ROW_DETECTION_ENABLED,
    )
    checkout_use_case = providers.Factory(CheckoutUseCase, client=booking_service_client)
    booking_flow_coordinator = providers.Factory(
        BookingFlowCoordinator,
        client=booking_service_client,
        fare_config=fare_config,
    )


container = Container()


def create_booking_flow_coordinator(
    *,
    flight_id: str,
    travel_date: str,
    origin: str,
    destination: str,
    fallback_base_fare: Optional[int] = None,
    holder_id: Optional[str] = None,
) -> BookingFlowCoordinator:
    """Wire one booking flow: shared state plus its inventory, lease and checkout components."""
    settings: Settings = container.config_service()
    flow = BookingFlow(
        flight_id=flight_id,
        travel_date=travel_date,
        origin=origin,
        destination=destination,
        holder_id=holder_id or settings.DEFAULT_HOLDER_ID,
        currency=settings.DEFAULT_CURRENCY,
        fallback_base_fare=fallback_base_fare,
    )
    inventory = container.seat_inventory_model()
    lease = container.lease_controller(flow=flow, inventory=inventory)
    return container.booking_flow_coordinator(
        flow=flow,
        inventory=inventory,
        lease=lease,
        checkout=container.checkout_use_case(),
    )


def setup() -> None:
    container.config_service()


async def cleanup() -> None:
    client = container.booking_service_client()
    await client.aclose()
    container.reset_singletons()
