from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional

from scheduler import DISPATCHER_REGISTRY, INSERT_POLICY_REGISTRY

DEFAULT_LINGER_TICKS = 1
DEFAULT_SERVICE_BUDGET = 100


class ConfigurationError(ValueError):
    """Raised when a simulation is configured with unusable parameters."""


@dataclass
class SimulationConfig:
    """Building layout and tuning knobs for a simulation run."""

    floors: int
    elevator_count: int
    linger_ticks: int = DEFAULT_LINGER_TICKS
    service_budget: int = DEFAULT_SERVICE_BUDGET
    request_interval: int = 1
    request_probability: float = 0.5
    random_seed: Optional[int] = None
    dispatcher: str = "ranked"
    insert_policy: str = "resort"
    start_minute: int = 8 * 60
    event_history: int = 500

    def __post_init__(self) -> None:
        if self.floors < 1:
            raise ConfigurationError(f"floors must be at least 1, got {self.floors}")
        if self.elevator_count < 1:
            raise ConfigurationError(
                f"elevator_count must be at least 1, got {self.elevator_count}"
            )
        if self.linger_ticks < 1:
            raise ConfigurationError(f"linger_ticks must be at least 1, got {self.linger_ticks}")
        if self.service_budget < 1:
            raise ConfigurationError(
                f"service_budget must be at least 1, got {self.service_budget}"
            )
        if self.request_interval < 0:
            raise ConfigurationError(
                f"request_interval cannot be negative, got {self.request_interval}"
            )
        if not 0.0 <= self.request_probability <= 1.0:
            raise ConfigurationError(
                f"request_probability must be within [0, 1], got {self.request_probability}"
            )
        for name in ("dispatcher", "insert_policy"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigurationError(f"{name} must be a strategy name, got {value!r}")
        if self.dispatcher.lower() not in DISPATCHER_REGISTRY:
            raise ConfigurationError(
                f"Unknown dispatcher '{self.dispatcher}'. Available: {', '.join(DISPATCHER_REGISTRY)}"
            )
        if self.insert_policy.lower() not in INSERT_POLICY_REGISTRY:
            raise ConfigurationError(
                f"Unknown insert policy '{self.insert_policy}'. "
                f"Available: {', '.join(INSERT_POLICY_REGISTRY)}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        try:
            return cls(**data)
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc
