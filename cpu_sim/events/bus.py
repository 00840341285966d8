"""In-process event bus for the simulation trace."""

from __future__ import annotations

import random
import uuid
from collections.abc import Iterable
from typing import Callable

from .types import EventType, SimEvent


EventHandler = Callable[[SimEvent], None]


class EventBus:
    """Publish trace events to subscribers in order.

    Every event gets a monotonically increasing ``seq``. ``event_id`` is either
    derived from ``seq`` (deterministic), a uuid4 (random) or drawn from a
    seeded generator (seeded_random) so two runs with one seed share ids.
    """

    ID_MODES = ("deterministic", "random", "seeded_random")

    def __init__(
        self,
        *,
        event_id_mode: str = "deterministic",
        event_id_seed: int | None = None,
    ) -> None:
        mode = event_id_mode.lower().strip()
        if mode not in self.ID_MODES:
            raise ValueError(f"unknown event id mode '{event_id_mode}'")
        self._mode = mode
        self._rng = random.Random(event_id_seed)
        self._routes: list[tuple[EventHandler, frozenset[EventType] | None]] = []
        self._seq = 0

    def subscribe(self, handler: EventHandler, types: Iterable[EventType] | None = None) -> None:
        """Register ``handler``; with ``types`` it only sees those event types."""
        self._routes.append((handler, frozenset(types) if types is not None else None))

    def publish(
        self,
        *,
        event_type: EventType,
        time: int,
        pid: int | None = None,
        resource_id: int | None = None,
        payload: dict | None = None,
    ) -> SimEvent:
        event = SimEvent(
            event_id=self._event_id(),
            seq=self._seq,
            time=time,
            type=event_type,
            pid=pid,
            resource_id=resource_id,
            payload=payload or {},
        )
        self._seq += 1
        for handler, types in list(self._routes):
            if types is None or event_type in types:
                handler(event)
        return event

    @property
    def published(self) -> int:
        return self._seq

    def reset(self) -> None:
        self._seq = 0
        self._routes.clear()

    def _event_id(self) -> str:
        if self._mode == "seeded_random":
            return f"{self._rng.getrandbits(128):032x}"
        if self._mode == "random":
            return str(uuid.uuid4())
        return f"evt-{self._seq:08d}"
