"""
Seat Eligibility Domain

Exit-row / extra-legroom restrictions: children and passengers who need
assistance may not occupy these seats.

Extra-legroom comes from two sources:
1. the seat's own `extra_legroom` feature
2. the aircraft rule: Economy seats on the first Economy row

Exit rows are additionally guessed from the seat-map geometry (see
`detect_exit_rows`). The guess is approximate; it can be switched off with
EXIT_ROW_DETECTION_ENABLED.
"""

from collections import defaultdict
from typing import Iterable, Optional

import attrs

from src.service.flight_booking.domain.entity.passenger_entity import Passenger
from src.service.flight_booking.domain.entity.seat_entity import EXTRA_LEGROOM, Seat, SeatMap
from src.service.flight_booking.domain.enum.seat_class import SeatClass


ECONOMY_START_ROW = {
    'DEFAULT': 11,
    'A320': 11,
    'B737': 12,
}


def economy_start_row(aircraft: Optional[str]) -> int:
    if aircraft and aircraft.upper() in ECONOMY_START_ROW:
        return ECONOMY_START_ROW[aircraft.upper()]
    return ECONOMY_START_ROW['DEFAULT']


def apply_aircraft_rules(seats: Iterable[Seat], aircraft: Optional[str]) -> list[Seat]:
    """Tag Economy seats on the first Economy row as extra-legroom."""
    start_row = economy_start_row(aircraft)
    tagged = []
    for seat in seats:
        if seat.row == start_row and seat.seat_class == SeatClass.ECONOMY:
            seat = attrs.evolve(seat, features=seat.features | {EXTRA_LEGROOM})
        tagged.append(seat)
    return tagged


def detect_exit_rows(seats: Iterable[Seat]) -> set[int]:
    """
    Guess exit rows from seat-map geometry.

    A row is flagged when:
    - its seats have a column gap of 2 or more (door cut-out)
    - the next populated row number is 2 or more away (door space before it)
    - it has at most max(1, floor(median * 0.6)) seats
    """
    rows: dict[int, list[int]] = defaultdict(list)
    for seat in seats:
        if seat.row and seat.col:
            rows[seat.row].append(seat.col)
    if not rows:
        return set()

    row_numbers = sorted(rows)
    exit_rows: set[int] = set()

    for row in row_numbers:
        cols = sorted(rows[row])
        if any(b - a >= 2 for a, b in zip(cols, cols[1:])):
            exit_rows.add(row)

    for current, following in zip(row_numbers, row_numbers[1:]):
        if following - current >= 2:
            exit_rows.add(current)

    counts = sorted(len(rows[row]) for row in row_numbers)
    median = counts[len(counts) // 2]
    threshold = max(1, int(median * 0.6))
    for row in row_numbers:
        if len(rows[row]) <= threshold:
            exit_rows.add(row)

    return exit_rows


def has_restricted_passengers(passengers: Iterable[Passenger]) -> bool:
    return any(passenger.requires_seat_protection for passenger in passengers)


def is_structurally_restricted(seat: Seat, exit_rows: set[int]) -> bool:
    return seat.is_extra_legroom or seat.row in exit_rows


def restricted_seat_ids(
    seat_map: SeatMap,
    passengers: Iterable[Passenger],
    *,
    exit_row_detection: bool = True,
) -> frozenset[str]:
    """Seat ids the current passenger composition may not occupy."""
    if not has_restricted_passengers(passengers):
        return frozenset()
    exit_rows = detect_exit_rows(seat_map.seats) if exit_row_detection else set()
    return frozenset(
        seat.seat_id
        for seat in seat_map.seats
        if is_structurally_restricted(seat, exit_rows)
    )
