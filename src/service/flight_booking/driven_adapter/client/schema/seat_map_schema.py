"""
Seat map wire schema.

The inventory service has spelled the same field several ways over time;
every accepted spelling is listed here, and nowhere else.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SeatPayload(BaseModel):
    model_config = ConfigDict(
        extra='ignore',
        coerce_numbers_to_str=True,
        json_schema_extra={
            'example': {
                'seatId': '11A',
                'row': 11,
                'col': 1,
                'seatClass': 'Economy',
                'status': 'available',
                'priceModifier': 250,
                'features': {'extraLegroom': True},
            }
        },
    )

    seat_id: str = Field(validation_alias=AliasChoices('seatId', 'label', 'id'))
    row: int
    col: int
    seat_class: Optional[str] = Field(
        default=None, validation_alias=AliasChoices('seatClass', 'category', 'class')
    )
    status: Optional[str] = None
    held_by: Optional[Any] = Field(default=None, validation_alias=AliasChoices('heldBy', 'held_by'))
    hold_until: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices('holdUntil', 'heldUntil', 'holdExpiresAt')
    )
    price_modifier: Optional[float] = Field(default=None, validation_alias='priceModifier')
    class_price: Optional[float] = Field(default=None, validation_alias='classPrice')
    price: Optional[Any] = None
    features: Optional[Any] = None


class SeatMapPayload(BaseModel):
    model_config = ConfigDict(extra='ignore', coerce_numbers_to_str=True)

    flight_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices('flightId', 'flight', 'flightNumber')
    )
    travel_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices('date', 'travelDate')
    )
    origin: Optional[str] = None
    destination: Optional[str] = None
    rows: int = 0
    cols: int = 0
    seats: List[Dict[str, Any]] = Field(default_factory=list)
    default_price: Optional[Any] = Field(default=None, validation_alias='defaultPrice')
    base_price: Optional[Any] = Field(default=None, validation_alias='basePrice')
    price: Optional[Any] = None
    default_per_seat: Optional[Any] = Field(default=None, validation_alias='defaultPerSeat')
    aircraft: Optional[str] = Field(
        default=None, validation_alias=AliasChoices('aircraft', 'aircraftType')
    )
