"""Scheduler registry and factory."""

from __future__ import annotations

from collections.abc import Callable

from cpu_sim.protocols import PCPResourceProtocol, PIPResourceProtocol, PriorityResourceProtocol

from .base import IScheduler
from .fifo import FIFOScheduler
from .priority import PriorityScheduler
from .rr import RoundRobinScheduler
from .sjf import SJFScheduler
from .stcf import STCFScheduler


SchedulerFactory = Callable[[], IScheduler]


def _priority() -> IScheduler:
    return PriorityScheduler(PriorityResourceProtocol(), name="prio", title="Priority")


def _priority_aging() -> IScheduler:
    return PriorityScheduler(
        PriorityResourceProtocol(), aging=True, name="pa", title="Priority + aging"
    )


def _priority_ceiling() -> IScheduler:
    return PriorityScheduler(PCPResourceProtocol(), name="pcp", title="Priority + PCP Protocol")


def _priority_inheritance() -> IScheduler:
    return PriorityScheduler(PIPResourceProtocol(), name="pip", title="Priority + PIP Protocol")


_REGISTRY: dict[str, SchedulerFactory] = {
    "fifo": FIFOScheduler,
    "fcfs": FIFOScheduler,
    "sjf": SJFScheduler,
    "stcf": STCFScheduler,
    "srtf": STCFScheduler,
    "rr": RoundRobinScheduler,
    "round_robin": RoundRobinScheduler,
    "prio": _priority,
    "priority": _priority,
    "pa": _priority_aging,
    "priority_aging": _priority_aging,
    "pcp": _priority_ceiling,
    "pip": _priority_inheritance,
}


def register_scheduler(name: str, factory: SchedulerFactory) -> None:
    _REGISTRY[name.lower()] = factory


def available_schedulers() -> list[str]:
    return sorted(_REGISTRY)


def create_scheduler(name: str) -> IScheduler:
    key = name.lower()
    if key not in _REGISTRY:
        raise ValueError(f"unknown scheduler {name}")
    return _REGISTRY[key]()
