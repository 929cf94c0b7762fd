from __future__ import annotations

from typing import Iterable, List


def travel_direction(from_floor: int, to_floor: int) -> int:
    """Return +1 when ``to_floor`` is at or above ``from_floor``, else -1."""

    return 1 if to_floor >= from_floor else -1


def sort_floors_in_direction(floors: Iterable[int], direction: int) -> List[int]:
    """Sort floors in the order a sweep in ``direction`` would reach them."""

    return sorted(floors, reverse=direction < 0)


def ranking_key(elevator, index: int, floor: int) -> tuple:
    """Stable ranking: distance, then remaining trips, then declaration order."""

    return (elevator.distance_to(floor), elevator.trips_until_service, index)
