from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .interface import DispatchableElevator
from .utils import ranking_key

logger = logging.getLogger(__name__)


class RankedDispatcher:
    """Prefers an idle car at the origin, then cars already heading past it.

    Remaining candidates are ranked by distance to the origin. Ties go to
    the car with fewer trips left before service so wear spreads evenly
    across the bank, then to declaration order.
    """

    def pick_elevator(
        self,
        elevators: Sequence[DispatchableElevator],
        origin: int,
        destination: int,
    ) -> Optional[DispatchableElevator]:
        if origin == destination:
            return None

        running = [(index, e) for index, e in enumerate(elevators) if e.running]
        if not running:
            logger.debug("No running elevator for request %d -> %d", origin, destination)
            return None

        for _, elevator in running:
            if not elevator.occupied and elevator.current_floor == origin:
                return elevator

        direction = 1 if destination > origin else -1
        candidates = [(i, e) for i, e in running if e.is_en_route_to(origin, direction)]
        if not candidates:
            # Committed immediately; the request is never re-scored later.
            candidates = running
        return self._rank(candidates, origin)[0]

    def _rank(self, candidates: List[tuple], origin: int) -> List[DispatchableElevator]:
        ordered = sorted(candidates, key=lambda item: ranking_key(item[1], item[0], origin))
        return [elevator for _, elevator in ordered]
