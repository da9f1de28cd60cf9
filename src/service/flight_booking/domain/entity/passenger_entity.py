from datetime import date
from typing import Optional

import attrs

from src.service.flight_booking.domain.enum.passenger_type import PassengerType


@attrs.define(frozen=True)
class SpecialAssistance:
    disabled: bool = False


@attrs.define(frozen=True)
class Passenger:
    passenger_type: PassengerType = PassengerType.ADULT
    special_assistance: SpecialAssistance = attrs.field(factory=SpecialAssistance)
    title: str = 'Mr'
    first_name: str = ''
    last_name: str = ''
    dob: Optional[date] = None
    gender: str = 'M'
    nationality: str = ''
    document_type: str = ''
    document_number: str = ''
    seat_id: Optional[str] = None

    @property
    def is_child(self) -> bool:
        return self.passenger_type == PassengerType.CHILD

    @property
    def needs_assistance(self) -> bool:
        return self.special_assistance.disabled

    @property
    def requires_seat_protection(self) -> bool:
        """Children and assisted passengers may not sit in exit / extra-legroom rows."""
        return self.is_child or self.needs_assistance

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'.strip()


@attrs.define(frozen=True)
class Contact:
    name: str = ''
    email: str = ''
    phone: str = ''
