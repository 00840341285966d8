"""Default metrics implementation."""

from __future__ import annotations

from cpu_sim.events import EventType, SimEvent

from .base import IMetric


class SchedulingMetrics(IMetric):
    """Aggregate turnaround, waiting, response and CPU usage from the event stream."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._arrival: dict[int, int] = {}
        self._lifespan: dict[int, int] = {}
        self._first_dispatch: dict[int, int] = {}
        self._exit: dict[int, int] = {}
        self._busy_ticks = 0
        self._idle_ticks = 0
        self._dispatch_count = 0
        self._preempt_count = 0
        self._block_count = 0
        self._priority_change_count = 0
        self._event_count = 0
        self._max_time = 0

    def consume(self, event: SimEvent) -> None:
        self._event_count += 1
        self._max_time = max(self._max_time, event.time)
        pid = event.pid

        if event.type == EventType.PROCESS_FORKED and pid is not None:
            self._arrival[pid] = event.time
            lifespan = event.payload.get("lifespan")
            if isinstance(lifespan, int):
                self._lifespan[pid] = lifespan

        elif event.type == EventType.DISPATCH and pid is not None:
            self._dispatch_count += 1
            self._first_dispatch.setdefault(pid, event.time)

        elif event.type == EventType.RUN:
            self._busy_ticks += 1
            self._max_time = max(self._max_time, event.time + 1)

        elif event.type == EventType.IDLE:
            self._idle_ticks += 1
            self._max_time = max(self._max_time, event.time + 1)

        elif event.type == EventType.PREEMPT:
            self._preempt_count += 1

        elif event.type == EventType.BLOCKED:
            self._block_count += 1

        elif event.type == EventType.PRIORITY_CHANGE:
            self._priority_change_count += 1

        elif event.type == EventType.PROCESS_EXIT and pid is not None:
            self._exit[pid] = event.time

    def report(self) -> dict:
        turnaround: list[int] = []
        waiting: list[int] = []
        response: list[int] = []

        for pid, exit_time in self._exit.items():
            arrival = self._arrival.get(pid)
            if arrival is None:
                continue
            turnaround.append(exit_time - arrival)
            lifespan = self._lifespan.get(pid)
            if lifespan is not None:
                waiting.append(exit_time - arrival - lifespan)
        for pid, first in self._first_dispatch.items():
            arrival = self._arrival.get(pid)
            if arrival is not None:
                response.append(first - arrival)

        total_ticks = self._busy_ticks + self._idle_ticks

        return {
            "processes_forked": len(self._arrival),
            "processes_completed": len(self._exit),
            "throughput": len(self._exit) / total_ticks if total_ticks else 0.0,
            "avg_turnaround_time": sum(turnaround) / len(turnaround) if turnaround else 0.0,
            "avg_waiting_time": sum(waiting) / len(waiting) if waiting else 0.0,
            "max_waiting_time": max(waiting) if waiting else 0,
            "avg_response_time": sum(response) / len(response) if response else 0.0,
            "cpu_utilization": self._busy_ticks / total_ticks if total_ticks else 0.0,
            "busy_ticks": self._busy_ticks,
            "idle_ticks": self._idle_ticks,
            "dispatch_count": self._dispatch_count,
            "preempt_count": self._preempt_count,
            "block_count": self._block_count,
            "priority_change_count": self._priority_change_count,
            "event_count": self._event_count,
            "max_time": self._max_time,
        }
