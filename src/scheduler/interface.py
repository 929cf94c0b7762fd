from __future__ import annotations

from typing import List, Optional, Protocol, Sequence


class DispatchableElevator(Protocol):
    """The view of an elevator that dispatch heuristics rely on."""

    current_floor: int
    trips_until_service: int

    @property
    def running(self) -> bool: ...

    @property
    def occupied(self) -> bool: ...

    def distance_to(self, floor: int) -> int: ...

    def is_en_route_to(self, floor: int, direction: int) -> bool: ...


class Dispatcher(Protocol):
    """Strategy interface for choosing the elevator that serves a request."""

    def pick_elevator(
        self,
        elevators: Sequence[DispatchableElevator],
        origin: int,
        destination: int,
    ) -> Optional[DispatchableElevator]:
        """
        Return the elevator that should be summoned, or None.

        None means the request cannot be served and is dropped by the
        caller; implementations never raise for an unservable request.
        """
        ...


class DestinationPolicy(Protocol):
    """Strategy interface for inserting a stop into an elevator's queue."""

    def insert(self, destinations: List[int], floor: int, current_floor: int) -> None:
        """Mutate ``destinations`` in place to include ``floor``."""
        ...
