"""Simulation primitives for the elevator bank."""

from .config import ConfigurationError, SimulationConfig
from .elevator import Elevator
from .events import SimulationEvent
from .passenger import PassengerRequest
from .simulation import MetricsSnapshot, MetricsTracker, Simulator

__all__ = [
    "ConfigurationError",
    "Elevator",
    "MetricsSnapshot",
    "MetricsTracker",
    "PassengerRequest",
    "SimulationConfig",
    "SimulationEvent",
    "Simulator",
]
