"""Model package exports."""

from .context import SimContext
from .errors import ProtocolViolation, ResourceIdError, SimulationError
from .queue import ProcessQueue
from .runtime import (
    MAX_PRIO,
    NR_RESOURCES,
    Acquisition,
    ProcessState,
    ProcessStatus,
    ResourceState,
)
from .spec import AcquireSpec, ModelSpec, ProcessSpec, SchedulerSpec, SimSpec

__all__ = [
    "MAX_PRIO",
    "NR_RESOURCES",
    "AcquireSpec",
    "Acquisition",
    "ModelSpec",
    "ProcessQueue",
    "ProcessSpec",
    "ProcessState",
    "ProcessStatus",
    "ProtocolViolation",
    "ResourceIdError",
    "ResourceState",
    "SchedulerSpec",
    "SimContext",
    "SimSpec",
    "SimulationError",
]
