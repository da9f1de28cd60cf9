from enum import StrEnum


class PassengerType(StrEnum):
    ADULT = 'adult'
    CHILD = 'child'
