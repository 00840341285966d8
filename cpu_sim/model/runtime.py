"""Runtime types shared across the simulation engine and plugins."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .queue import ProcessQueue


MAX_PRIO = 100
NR_RESOURCES = 32


class ProcessStatus(str, Enum):
    READY = "ready"
    RUNNING = "running"
    BLOCKED = "blocked"
    TERMINATED = "terminated"


@dataclass(slots=True)
class Acquisition:
    """One scheduled resource hold: taken at ``at`` ticks of age, kept for ``duration``."""

    resource_id: int
    at: int
    duration: int

    @property
    def release_at(self) -> int:
        return self.at + self.duration


@dataclass(slots=True)
class ProcessState:
    """Engine-owned mutable record for one simulated process."""

    pid: int
    lifespan: int
    priority_original: int
    arrival: int = 0
    priority: int = -1
    status: ProcessStatus = ProcessStatus.READY
    age: int = 0
    acquires: list[Acquisition] = field(default_factory=list)
    held: list[int] = field(default_factory=list)
    pending: int = 0
    first_run: Optional[int] = None
    exit_tick: Optional[int] = None

    def __post_init__(self) -> None:
        if self.priority < 0:
            self.priority = self.priority_original

    @property
    def remaining(self) -> int:
        return self.lifespan - self.age

    @property
    def finished(self) -> bool:
        return self.age >= self.lifespan

    def next_acquisition(self) -> Optional[Acquisition]:
        if self.pending >= len(self.acquires):
            return None
        return self.acquires[self.pending]


@dataclass(slots=True)
class ResourceState:
    """Exclusive, non-reentrant resource with an optional owner."""

    rid: int
    waitqueue: "ProcessQueue"
    owner: Optional[int] = None

    @property
    def free(self) -> bool:
        return self.owner is None
