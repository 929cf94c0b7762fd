from __future__ import annotations

import logging
import math
import random
from collections import deque
from dataclasses import asdict, dataclass
from typing import Callable, Deque, Dict, List, Optional, Tuple

from scheduler import get_dispatcher, get_insert_policy

from . import events as ev
from .config import SimulationConfig
from .elevator import Elevator
from .events import SimulationEvent, format_clock
from .passenger import PassengerRequest

logger = logging.getLogger(__name__)

ALL_EVENTS = "*"


@dataclass
class MetricsSnapshot:
    time_step: int
    average_wait: float
    wait_p95: int
    average_ride: float
    ride_p95: int
    throughput: int
    dropped_requests: int
    trips_by_elevator: Dict[str, int]


def summarize(values: List[int], percentile: float = 0.95) -> Tuple[float, int]:
    """Mean and nearest-rank percentile of whole-tick durations."""
    if not values:
        return 0.0, 0
    ordered = sorted(values)
    rank = max(1, math.ceil(percentile * len(ordered)))
    return sum(ordered) / len(ordered), ordered[rank - 1]


class MetricsTracker:
    """Passenger timings and per-car trip counts, fed by the cars as they stop."""

    def __init__(self) -> None:
        self.wait_times: List[int] = []
        self.ride_times: List[int] = []
        self.trips_by_elevator: Dict[str, int] = {}
        self.dropped_requests: int = 0

    @property
    def throughput(self) -> int:
        return sum(self.trips_by_elevator.values())

    def record_wait_time(self, passenger: PassengerRequest) -> None:
        if passenger.wait_time is not None:
            self.wait_times.append(passenger.wait_time)

    def record_trip(self, elevator_label: str, passenger: PassengerRequest) -> None:
        self.trips_by_elevator[elevator_label] = self.trips_by_elevator.get(elevator_label, 0) + 1
        if passenger.ride_time is not None:
            self.ride_times.append(passenger.ride_time)

    def record_drop(self) -> None:
        self.dropped_requests += 1

    def snapshot(self, time_step: int) -> MetricsSnapshot:
        average_wait, wait_p95 = summarize(self.wait_times)
        average_ride, ride_p95 = summarize(self.ride_times)
        return MetricsSnapshot(
            time_step=time_step,
            average_wait=average_wait,
            wait_p95=wait_p95,
            average_ride=average_ride,
            ride_p95=ride_p95,
            throughput=self.throughput,
            dropped_requests=self.dropped_requests,
            trips_by_elevator=dict(self.trips_by_elevator),
        )


class Simulator:
    """Tick-driven building simulation with a single dispatcher.

    Pacing is left to the caller: call :meth:`step` from a timer, a test or
    a plain loop, and stop once :meth:`is_settled` reports True.
    """

    def __init__(self, config: SimulationConfig) -> None:
        self.config = config
        self.floors = config.floors
        self.dispatcher = get_dispatcher(config.dispatcher)
        self.random = random.Random(config.random_seed)
        self.metrics = MetricsTracker()
        self.elevators: List[Elevator] = [
            Elevator(
                elevator_id=i,
                floor_count=config.floors,
                linger_ticks=config.linger_ticks,
                trips_until_service=config.service_budget,
                insert_policy=get_insert_policy(config.insert_policy),
                metrics=self.metrics,
            )
            for i in range(config.elevator_count)
        ]
        self.current_time: int = 0
        self.time_to_request: int = config.request_interval
        self.event_hooks: Dict[str, List[Callable[[SimulationEvent], None]]] = {}
        self.recent_events: Deque[SimulationEvent] = deque(maxlen=config.event_history)
        self._next_passenger_id = 0
        self._stopped = False
        logger.info(
            "Configured %d elevator(s) over %d floor(s) using %s dispatch",
            config.elevator_count,
            config.floors,
            config.dispatcher,
        )

    @classmethod
    def configure(cls, floor_count: int, elevator_count: int, **options) -> "Simulator":
        config = SimulationConfig.from_dict(
            {"floors": floor_count, "elevator_count": elevator_count, **options}
        )
        return cls(config)

    @property
    def stopped(self) -> bool:
        return self._stopped

    def step(self) -> bool:
        """Advance one tick. Returns False when the simulation was stopped."""
        if self._stopped:
            return False
        self._maybe_generate_request()
        for elevator in self.elevators:
            for event in elevator.tick(self.current_time):
                self._publish(event)
        self.current_time += 1
        return True

    def run(self, max_steps: Optional[int] = None) -> int:
        steps = 0
        while not self.is_settled():
            if max_steps is not None and steps >= max_steps:
                break
            self.step()
            steps += 1
        return steps

    def is_settled(self) -> bool:
        if self._stopped:
            return True
        return all(not e.running and not e.has_pending_work for e in self.elevators)

    def stop(self) -> None:
        if not self._stopped:
            logger.info("Simulation stopped at t=%d", self.current_time)
        self._stopped = True

    def submit_request(self, origin: int, destination: int) -> Optional[Elevator]:
        for floor in (origin, destination):
            if not 0 <= floor < self.floors:
                raise ValueError(f"Floor {floor} is outside the building (0..{self.floors - 1})")

        if origin == destination:
            self._report(f"Ignored request from floor {origin + 1} to itself.", ev.IGNORED, origin)
            return None

        elevator = self.dispatcher.pick_elevator(self.elevators, origin, destination)
        if elevator is None:
            self.metrics.record_drop()
            logger.info("Dropped request %d -> %d: no elevator in service", origin, destination)
            self._report(
                f"Request from floor {origin + 1} to floor {destination + 1} dropped: "
                "all elevators out of service.",
                ev.DROPPED,
                origin,
            )
            return None

        elevator.summon(
            origin,
            destination,
            requested_at=self.current_time,
            passenger_id=self._next_passenger_id,
        )
        self._next_passenger_id += 1
        self._report(
            f"Request from floor {origin + 1} to floor {destination + 1} "
            f"assigned to {elevator.label}.",
            ev.REQUEST,
            origin,
        )
        return elevator

    def service_elevator(self, elevator_id: int, trips: Optional[int] = None) -> Optional[Elevator]:
        elevator = self._get_elevator(elevator_id)
        if elevator is None:
            return None
        if trips is not None and trips < 1:
            raise ValueError(f"trips must be at least 1, got {trips}")
        elevator.service(self.config.service_budget if trips is None else trips)
        logger.info("%s serviced, %d trips until next service", elevator.label, elevator.trips_until_service)
        self._report(f"{elevator.label} returned to service.", ev.SERVICED, elevator.current_floor)
        return elevator

    def on_event(self, event: str, callback: Callable[[SimulationEvent], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def snapshot(self) -> dict:
        return {
            "time": self.current_time,
            "clock": format_clock(self.current_time, self.config.start_minute),
            "settled": self.is_settled(),
            "elevators": [elevator.snapshot() for elevator in self.elevators],
            "metrics": asdict(self.metrics.snapshot(self.current_time)),
        }

    def _maybe_generate_request(self) -> None:
        self.time_to_request -= 1
        if self.time_to_request >= 0:
            return
        self.time_to_request = self.config.request_interval
        if self.random.random() >= self.config.request_probability:
            return
        origin = self.random.randrange(self.floors)
        destination = self.random.randrange(self.floors)
        self.submit_request(origin, destination)

    def _report(self, message: str, kind: str, floor: Optional[int] = None) -> None:
        self._publish(
            SimulationEvent(
                timestamp=self.current_time,
                source_id=ev.SIMULATOR_SOURCE,
                message=message,
                kind=kind,
                floor=floor,
            )
        )

    def _publish(self, event: SimulationEvent) -> None:
        logger.debug("%s", event)
        self.recent_events.append(event)
        for callback in self.event_hooks.get(event.kind, []):
            callback(event)
        for callback in self.event_hooks.get(ALL_EVENTS, []):
            callback(event)

    def _get_elevator(self, elevator_id: int) -> Optional[Elevator]:
        for elevator in self.elevators:
            if elevator.elevator_id == elevator_id:
                return elevator
        return None
