from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

SIMULATOR_SOURCE = "Simulator"

REQUEST = "request"
DROPPED = "dropped"
IGNORED = "ignored"
MOVED = "moved"
DOORS_OPENED = "doors_opened"
DOORS_CLOSED = "doors_closed"
BOARDED = "boarded"
DISEMBARKED = "disembarked"
RETIRED = "retired"
SERVICED = "serviced"


def format_clock(timestamp: int, start_minute: int = 8 * 60) -> str:
    """Render simulated minutes as a wall-clock HH:MM string."""
    minutes = (start_minute + timestamp) % (24 * 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class SimulationEvent:
    """A single observable state transition.

    ``timestamp`` counts simulated minutes since the start of the run and
    ``source_id`` is the label of whatever produced the record, either an
    elevator ("Elevator 2") or the simulator itself.
    """

    timestamp: int
    source_id: str
    message: str
    kind: str
    floor: Optional[int] = None

    def clock(self, start_minute: int = 8 * 60) -> str:
        return format_clock(self.timestamp, start_minute)

    def as_dict(self) -> dict:
        return asdict(self)

    def __str__(self) -> str:
        return f"[{self.timestamp}] {self.source_id}: {self.message}"
