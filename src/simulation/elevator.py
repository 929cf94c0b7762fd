from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from scheduler import DestinationPolicy, ResortOnInsertPolicy
from scheduler.utils import travel_direction

from . import events as ev
from .config import DEFAULT_LINGER_TICKS, DEFAULT_SERVICE_BUDGET
from .events import SimulationEvent
from .passenger import PassengerRequest

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from .simulation import MetricsTracker

logger = logging.getLogger(__name__)


@dataclass
class Elevator:
    """A single car that moves one floor per tick toward the head of its queue.

    The car only ever reads and writes its own fields, so the order in which
    a bank of elevators is ticked does not change the outcome.
    """

    elevator_id: int
    floor_count: int
    current_floor: int = 0
    linger_ticks: int = DEFAULT_LINGER_TICKS
    trips_until_service: int = DEFAULT_SERVICE_BUDGET
    insert_policy: DestinationPolicy = field(default_factory=ResortOnInsertPolicy)
    destinations: List[int] = field(default_factory=list)
    waiting_passengers: List[PassengerRequest] = field(default_factory=list)
    onboard_passengers: List[PassengerRequest] = field(default_factory=list)
    door_open: bool = False
    linger_remaining: int = 0
    distance_traveled: int = 0
    status: str = ""
    metrics: Optional["MetricsTracker"] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._refresh_status()

    @property
    def label(self) -> str:
        return f"Elevator {self.elevator_id + 1}"

    @property
    def occupied(self) -> bool:
        return bool(self.onboard_passengers)

    @property
    def running(self) -> bool:
        return self.trips_until_service > 0

    @property
    def has_pending_work(self) -> bool:
        return bool(
            self.onboard_passengers
            or self.waiting_passengers
            or self.destinations
            or self.linger_remaining
        )

    def distance_to(self, floor: int) -> int:
        return abs(floor - self.current_floor)

    def is_en_route_to(self, floor: int, direction: int) -> bool:
        """True when the current sweep passes ``floor`` heading ``direction``."""
        if not self.destinations:
            return False
        last = self.destinations[-1]
        if travel_direction(self.current_floor, last) != direction:
            return False
        return min(self.current_floor, last) <= floor <= max(self.current_floor, last)

    def summon(
        self,
        origin: int,
        destination: int,
        requested_at: int = 0,
        passenger_id: Optional[int] = None,
    ) -> PassengerRequest:
        request = PassengerRequest(
            passenger_id=passenger_id,
            origin=origin,
            destination=destination,
            requested_at=requested_at,
        )
        self.waiting_passengers.append(request)
        self.add_destination(origin)
        return request

    def add_destination(self, floor: int) -> None:
        self.insert_policy.insert(self.destinations, floor, self.current_floor)

    def tick(self, current_time: int = 0) -> List[SimulationEvent]:
        emitted: List[SimulationEvent] = []
        if self.linger_remaining > 0:
            if self.door_open:
                self._board_at_open_door(current_time, emitted)
            self.linger_remaining -= 1
            if self.linger_remaining == 0 and self.door_open:
                self.door_open = False
                emitted.append(
                    self._event(
                        current_time,
                        f"Doors closed on floor {self.current_floor + 1}.",
                        ev.DOORS_CLOSED,
                    )
                )
        elif self.destinations:
            # Riders assigned while the car already stood at their floor.
            if not self._serve_floor(current_time, emitted):
                self._move(current_time, emitted)
        elif self.waiting_passengers:
            self._resume_waiting(current_time, emitted)
        self._refresh_status()
        return emitted

    def service(self, trips: int = DEFAULT_SERVICE_BUDGET) -> None:
        self.trips_until_service = trips
        self._refresh_status()

    def snapshot(self) -> dict:
        return {
            "id": self.elevator_id,
            "label": self.label,
            "floor": self.current_floor,
            "destinations": list(self.destinations),
            "door_open": self.door_open,
            "running": self.running,
            "occupied": self.occupied,
            "waiting": len(self.waiting_passengers),
            "onboard": len(self.onboard_passengers),
            "trips_until_service": self.trips_until_service,
            "distance_traveled": self.distance_traveled,
            "status": self.status,
        }

    def _move(self, current_time: int, emitted: List[SimulationEvent]) -> None:
        target = self.destinations[0]
        self.current_floor += 1 if target > self.current_floor else -1
        self.distance_traveled += 1
        emitted.append(
            self._event(current_time, f"Moved to floor {self.current_floor + 1}", ev.MOVED)
        )
        # Queued floors passed on the way are served too.
        if self.current_floor in self.destinations:
            self.destinations.remove(self.current_floor)
            self.linger_remaining = self.linger_ticks
            self._serve_floor(current_time, emitted)
        self._requeue_left_behind()

    def _requeue_left_behind(self) -> None:
        # A rider whose stop was skipped is queued again only once every
        # remaining stop lies in their direction, so the car cannot bounce
        # back and forth past them.
        for passenger in self.waiting_passengers:
            if passenger.origin == self.current_floor or passenger.origin in self.destinations:
                continue
            if all((f - passenger.origin) * passenger.direction > 0 for f in self.destinations):
                self.add_destination(passenger.origin)

    def _resume_waiting(self, current_time: int, emitted: List[SimulationEvent]) -> None:
        if self._serve_floor(current_time, emitted):
            return
        self.add_destination(self.waiting_passengers[0].origin)

    def _intended_direction(self) -> Optional[int]:
        if self.destinations:
            return travel_direction(self.current_floor, self.destinations[0])
        if self.waiting_passengers:
            return self.waiting_passengers[0].direction
        return None

    def _boarders(self) -> List[PassengerRequest]:
        direction = self._intended_direction()
        return [
            p
            for p in self.waiting_passengers
            if p.origin == self.current_floor and (direction is None or p.direction == direction)
        ]

    def _board_at_open_door(self, current_time: int, emitted: List[SimulationEvent]) -> None:
        boarding = self._boarders()
        if boarding:
            self._board(boarding, current_time, emitted)

    def _board(
        self, boarding: List[PassengerRequest], current_time: int, emitted: List[SimulationEvent]
    ) -> None:
        for passenger in boarding:
            self.waiting_passengers.remove(passenger)
            self.onboard_passengers.append(passenger)
            passenger.record_boarding(current_time)
            if self.metrics is not None:
                self.metrics.record_wait_time(passenger)
            self.add_destination(passenger.destination)
        emitted.append(
            self._event(
                current_time,
                f"{len(boarding)} boarded on floor {self.current_floor + 1}.",
                ev.BOARDED,
            )
        )

    def _serve_floor(self, current_time: int, emitted: List[SimulationEvent]) -> bool:
        floor = self.current_floor
        boarding = self._boarders()
        has_dropoff = any(p.destination == floor for p in self.onboard_passengers)
        if not boarding and not has_dropoff:
            return False

        self.door_open = True
        self.linger_remaining = max(self.linger_remaining, self.linger_ticks)
        emitted.append(self._event(current_time, f"Doors open on floor {floor + 1}.", ev.DOORS_OPENED))
        if boarding:
            self._board(boarding, current_time, emitted)

        disembarking = [p for p in self.onboard_passengers if p.destination == floor]
        if disembarking:
            was_running = self.running
            for passenger in disembarking:
                self.onboard_passengers.remove(passenger)
                passenger.record_alighting(current_time)
                if self.metrics is not None:
                    self.metrics.record_trip(self.label, passenger)
            self.trips_until_service = max(0, self.trips_until_service - len(disembarking))
            emitted.append(
                self._event(
                    current_time,
                    f"{len(disembarking)} disembarked on floor {floor + 1}.",
                    ev.DISEMBARKED,
                )
            )
            if was_running and not self.running:
                logger.info("%s retired after exhausting its service budget", self.label)
                emitted.append(self._event(current_time, "Out of service.", ev.RETIRED))
        return True

    def _event(self, current_time: int, message: str, kind: str) -> SimulationEvent:
        return SimulationEvent(
            timestamp=current_time,
            source_id=self.label,
            message=message,
            kind=kind,
            floor=self.current_floor,
        )

    def _refresh_status(self) -> None:
        if not self.running:
            self.status = "Stopped"
        else:
            door = "Open" if self.door_open else "Closed"
            self.status = f"{self.current_floor + 1} - {door} ({len(self.onboard_passengers)})"
