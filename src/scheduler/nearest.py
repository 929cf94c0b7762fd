from __future__ import annotations

from typing import Optional, Sequence

from .interface import DispatchableElevator


class NearestDispatcher:
    """Assigns every request to the closest running elevator."""

    def pick_elevator(
        self,
        elevators: Sequence[DispatchableElevator],
        origin: int,
        destination: int,
    ) -> Optional[DispatchableElevator]:
        if origin == destination:
            return None
        available = [(index, e) for index, e in enumerate(elevators) if e.running]
        if not available:
            return None
        available.sort(key=lambda item: (item[1].distance_to(origin), item[0]))
        return available[0][1]
