"""SimPy-clocked tick driver for a single simulated CPU."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any, Callable, Optional

import simpy

from cpu_sim.events import EventBus, EventType, SimEvent
from cpu_sim.metrics import IMetric, SchedulingMetrics
from cpu_sim.model import (
    Acquisition,
    ModelSpec,
    ProcessSpec,
    ProcessState,
    ProcessStatus,
    ProtocolViolation,
    SimContext,
)
from cpu_sim.schedulers import IScheduler, create_scheduler

from .interfaces import ISimEngine


class SimEngine(ISimEngine):
    """Drive arrivals, resource holds, scheduling and aging one tick at a time.

    Per tick: admit arrivals, release holds that ended on the current process,
    ask the policy for the next process (retrying while acquisitions block),
    then age the chosen process by one tick.
    """

    DEFAULT_EVENT_ID_MODE = "deterministic"

    def __init__(
        self,
        scheduler: IScheduler | None = None,
        metrics: list[IMetric] | None = None,
    ) -> None:
        self._external_scheduler = scheduler
        self._metrics = metrics or [SchedulingMetrics()]
        self._subscribers: list[tuple[Callable[[SimEvent], None], frozenset[EventType] | None]] = []
        self._event_id_mode = self.DEFAULT_EVENT_ID_MODE
        self._event_id_seed: int | None = None

        self._env = simpy.Environment()
        self._event_bus = self._create_event_bus()
        self._events: list[SimEvent] = []
        self._setup_event_pipeline()

        self._spec: ModelSpec | None = None
        self._scheduler: IScheduler | None = None
        self._ctx: SimContext | None = None
        self._arrivals: deque[ProcessState] = deque()
        self._verify = True

        self._paused = False
        self._stopped = False
        self._finalized = False

    def subscribe(
        self,
        handler: Callable[[SimEvent], None],
        types: Iterable[EventType] | None = None,
    ) -> None:
        if any(existing == handler for existing, _ in self._subscribers):
            return
        route = (handler, frozenset(types) if types is not None else None)
        self._subscribers.append(route)
        self._event_bus.subscribe(*route)

    def build(self, spec: ModelSpec) -> None:
        self._event_id_mode = self._resolve_event_id_mode(spec.scheduler.params)
        self._event_id_seed = spec.sim.seed
        self.reset()
        self._spec = spec
        self._verify = spec.sim.verify

        self._scheduler = self._external_scheduler or create_scheduler(spec.scheduler.name)
        self._ctx = SimContext(
            resource_count=spec.resource_count,
            max_priority=spec.max_priority,
            bus=self._event_bus,
        )

        arrivals = [self._process_from_spec(proc) for proc in spec.processes]
        arrivals.sort(key=lambda proc: proc.arrival)
        self._arrivals = deque(arrivals)
        self._scheduler.initialize(self._ctx)

    def run(self, until: int | None = None) -> None:
        if self._spec is None:
            raise RuntimeError("build() must be called before run()")
        horizon = until if until is not None else self._spec.sim.duration

        while self.now < horizon and not self._stopped:
            if self._paused:
                break
            if not self._advance_once():
                break
        if self.done or self._stopped:
            self._finish()

    def step(self) -> None:
        if self._spec is None:
            raise RuntimeError("build() must be called before step()")
        if not self._stopped:
            self._advance_once()
        if self.done:
            self._finish()

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def stop(self) -> None:
        self._stopped = True

    def reset(self) -> None:
        self._env = simpy.Environment()
        for metric in self._metrics:
            metric.reset()
        self._event_bus = self._create_event_bus()
        self._events = []
        self._setup_event_pipeline()

        self._spec = None
        self._scheduler = None
        self._ctx = None
        self._arrivals = deque()
        self._verify = True
        self._paused = False
        self._stopped = False
        self._finalized = False

    def _setup_event_pipeline(self) -> None:
        self._event_bus.subscribe(self._events.append)
        for metric in self._metrics:
            self._event_bus.subscribe(metric.consume)
        for handler, types in self._subscribers:
            self._event_bus.subscribe(handler, types)

    @property
    def events(self) -> list[SimEvent]:
        return list(self._events)

    @property
    def now(self) -> int:
        return int(self._env.now)

    @property
    def context(self) -> SimContext:
        if self._ctx is None:
            raise RuntimeError("build() must be called first")
        return self._ctx

    @property
    def scheduler(self) -> IScheduler:
        if self._scheduler is None:
            raise RuntimeError("build() must be called first")
        return self._scheduler

    @property
    def done(self) -> bool:
        if self._ctx is None:
            return False
        if self._arrivals:
            return False
        return all(proc.status == ProcessStatus.TERMINATED for proc in self._ctx.processes.values())

    def metric_report(self) -> dict:
        merged: dict = {}
        for metric in self._metrics:
            merged.update(metric.report())
        return merged

    def snapshot(self) -> dict[str, Any]:
        """Status dump of the current tick."""
        ctx = self.context
        payload = ctx.snapshot()
        payload["scheduler"] = self.scheduler.title
        auxiliary = self.scheduler.auxiliary
        payload["auxiliary"] = auxiliary.as_list() if auxiliary is not None else []
        return payload

    def _create_event_bus(self) -> EventBus:
        return EventBus(
            event_id_mode=self._event_id_mode,
            event_id_seed=self._event_id_seed,
        )

    def _resolve_event_id_mode(self, params: dict[str, Any]) -> str:
        raw = params.get("event_id_mode", self.DEFAULT_EVENT_ID_MODE)
        mode = str(raw).strip().lower()
        if mode not in EventBus.ID_MODES:
            allowed = ", ".join(EventBus.ID_MODES)
            raise ValueError(f"invalid scheduler.params.event_id_mode '{raw}', expected one of: {allowed}")
        return mode

    @staticmethod
    def _process_from_spec(spec: ProcessSpec) -> ProcessState:
        acquires = [
            Acquisition(resource_id=item.resource, at=item.at, duration=item.duration)
            for item in spec.acquires
        ]
        acquires.sort(key=lambda item: (item.at, item.resource_id))
        return ProcessState(
            pid=spec.pid,
            lifespan=spec.lifespan,
            priority_original=spec.priority,
            arrival=spec.arrival,
            acquires=acquires,
        )

    def _advance_once(self) -> bool:
        assert self._ctx is not None and self._scheduler is not None
        ctx = self._ctx
        ctx.ticks = self.now

        self._admit_arrivals(ctx)
        self._release_due(ctx)
        self._dispatch(ctx)

        current = ctx.current
        if current is None:
            if self.done:
                return False
            ctx.emit(EventType.IDLE)
            if not self._arrivals and self._deadlocked(ctx):
                ctx.emit(
                    EventType.ERROR,
                    payload={
                        "reason": "deadlock",
                        "blocked": sorted(
                            pid
                            for pid, proc in ctx.processes.items()
                            if proc.status == ProcessStatus.BLOCKED
                        ),
                    },
                )
                self._stopped = True
        else:
            current.age += 1
            ctx.emit(
                EventType.RUN,
                pid=current.pid,
                payload={"age": current.age, "priority": current.priority},
            )

        self._env.run(until=self._env.timeout(1))
        ctx.ticks = self.now
        if self._verify:
            ctx.verify()
        return True

    def _admit_arrivals(self, ctx: SimContext) -> None:
        while self._arrivals and self._arrivals[0].arrival <= ctx.ticks:
            proc = self._arrivals.popleft()
            ctx.add_process(proc)
            proc.status = ProcessStatus.READY
            ctx.readyqueue.append(proc.pid)
            ctx.emit(
                EventType.PROCESS_FORKED,
                pid=proc.pid,
                payload={"lifespan": proc.lifespan, "priority": proc.priority_original},
            )

    def _release_due(self, ctx: SimContext) -> None:
        assert self._scheduler is not None
        current = ctx.current
        if current is None or current.status != ProcessStatus.RUNNING:
            return
        due = sorted(
            item.resource_id
            for item in current.acquires[: current.pending]
            if item.release_at == current.age and item.resource_id in current.held
        )
        for resource_id in due:
            self._scheduler.release(ctx, resource_id)

    def _dispatch(self, ctx: SimContext) -> None:
        assert self._scheduler is not None
        previous = ctx.current
        # Every failed acquisition blocks one more process, which bounds the retries.
        for _ in range(len(ctx.processes) + 1):
            chosen = self._scheduler.schedule(ctx)
            if previous is not None and chosen is not previous:
                self._switch_out(ctx, previous)
            ctx.current = chosen
            if chosen is None:
                return
            if chosen.status != ProcessStatus.RUNNING:
                raise ProtocolViolation(
                    f"scheduler selected process {chosen.pid} in {chosen.status.value} state"
                )
            if chosen is not previous:
                if chosen.first_run is None:
                    chosen.first_run = ctx.ticks
                ctx.emit(
                    EventType.DISPATCH,
                    pid=chosen.pid,
                    payload={"previous": previous.pid if previous is not None else None},
                )
            if self._acquire_due(ctx, chosen):
                return
            previous = chosen
        raise ProtocolViolation("scheduling did not settle within one pass over all processes")

    def _switch_out(self, ctx: SimContext, proc: ProcessState) -> None:
        if proc.status == ProcessStatus.READY:
            ctx.emit(EventType.PREEMPT, pid=proc.pid, payload={"age": proc.age})
            return
        if proc.status != ProcessStatus.RUNNING:
            return
        if not proc.finished:
            raise ProtocolViolation(f"runnable process {proc.pid} was dropped by the scheduler")
        if proc.held:
            raise ProtocolViolation(f"process {proc.pid} exits while holding resources {proc.held}")
        proc.status = ProcessStatus.TERMINATED
        proc.exit_tick = ctx.ticks
        ctx.emit(EventType.PROCESS_EXIT, pid=proc.pid, payload={"age": proc.age})

    def _acquire_due(self, ctx: SimContext, proc: ProcessState) -> bool:
        assert self._scheduler is not None
        while True:
            item: Optional[Acquisition] = proc.next_acquisition()
            if item is None or item.at != proc.age:
                return True
            if not self._scheduler.acquire(ctx, item.resource_id):
                return False
            proc.pending += 1

    def _deadlocked(self, ctx: SimContext) -> bool:
        auxiliary = self._scheduler.auxiliary if self._scheduler is not None else None
        if ctx.readyqueue or auxiliary:
            return False
        return any(proc.status == ProcessStatus.BLOCKED for proc in ctx.processes.values())

    def _finish(self) -> None:
        if self._finalized or self._ctx is None or self._scheduler is None:
            return
        self._finalized = True
        self._scheduler.finalize(self._ctx)
