"""Simulation engine interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Callable

from cpu_sim.events import EventType, SimEvent
from cpu_sim.model import ModelSpec


class ISimEngine(ABC):
    """Simulation engine contract."""

    @abstractmethod
    def build(self, spec: ModelSpec) -> None:
        """Build internal runtime state from model spec."""

    @abstractmethod
    def run(self, until: int | None = None) -> None:
        """Run simulation until horizon or until every process exited."""

    @abstractmethod
    def step(self) -> None:
        """Run one tick."""

    @abstractmethod
    def pause(self) -> None:
        """Pause simulation loop."""

    @abstractmethod
    def resume(self) -> None:
        """Resume a paused simulation loop."""

    @abstractmethod
    def stop(self) -> None:
        """Stop simulation; later run() calls return immediately."""

    @abstractmethod
    def reset(self) -> None:
        """Reset engine state."""

    @abstractmethod
    def subscribe(
        self,
        handler: Callable[[SimEvent], None],
        types: Iterable[EventType] | None = None,
    ) -> None:
        """Subscribe event handler, optionally to a subset of event types."""
