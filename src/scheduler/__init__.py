from __future__ import annotations

from typing import Dict, Type

from .interface import DestinationPolicy, DispatchableElevator, Dispatcher
from .nearest import NearestDispatcher
from .ranked import RankedDispatcher
from .stops import ResortOnInsertPolicy, SweepInsertPolicy

__all__ = [
    "DISPATCHER_REGISTRY",
    "INSERT_POLICY_REGISTRY",
    "DestinationPolicy",
    "DispatchableElevator",
    "Dispatcher",
    "NearestDispatcher",
    "RankedDispatcher",
    "ResortOnInsertPolicy",
    "SweepInsertPolicy",
    "get_dispatcher",
    "get_insert_policy",
]


DISPATCHER_REGISTRY: Dict[str, Type[Dispatcher]] = {
    "ranked": RankedDispatcher,
    "nearest": NearestDispatcher,
}

INSERT_POLICY_REGISTRY: Dict[str, Type[DestinationPolicy]] = {
    "resort": ResortOnInsertPolicy,
    "sweep": SweepInsertPolicy,
}


def get_dispatcher(name: str, **kwargs) -> Dispatcher:
    cls = DISPATCHER_REGISTRY.get(name.lower())
    if cls is None:
        raise ValueError(f"Unknown dispatcher '{name}'. Available: {', '.join(DISPATCHER_REGISTRY)}")
    return cls(**kwargs)


def get_insert_policy(name: str) -> DestinationPolicy:
    cls = INSERT_POLICY_REGISTRY.get(name.lower())
    if cls is None:
        raise ValueError(
            f"Unknown insert policy '{name}'. Available: {', '.join(INSERT_POLICY_REGISTRY)}"
        )
    return cls()
