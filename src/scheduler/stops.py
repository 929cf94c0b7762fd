from __future__ import annotations

from typing import List

from .utils import sort_floors_in_direction, travel_direction


class ResortOnInsertPolicy:
    """Appends the stop and resorts the whole queue on every insert.

    A stop below the car sorts the queue ascending, anything else sorts it
    descending, so the car always heads for one extreme of its queue first.
    A new stop can reorder stops that were already queued.
    """

    def insert(self, destinations: List[int], floor: int, current_floor: int) -> None:
        if floor in destinations or floor == current_floor:
            return
        destinations.append(floor)
        destinations.sort(reverse=floor >= current_floor)


class SweepInsertPolicy:
    """Keeps the current sweep and serves the reverse sweep afterwards (LOOK)."""

    def insert(self, destinations: List[int], floor: int, current_floor: int) -> None:
        if floor in destinations or floor == current_floor:
            return
        if not destinations:
            destinations.append(floor)
            return
        direction = travel_direction(current_floor, destinations[0])
        stops = destinations + [floor]
        ahead = [f for f in stops if (f - current_floor) * direction > 0]
        behind = [f for f in stops if (f - current_floor) * direction < 0]
        destinations[:] = sort_floors_in_direction(ahead, direction) + sort_floors_in_direction(
            behind, -direction
        )
