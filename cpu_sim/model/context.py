"""Explicit simulation context threaded through every policy call."""

from __future__ import annotations

from typing import Any, Callable, Optional

from cpu_sim.events import EventBus, EventType

from .errors import ProtocolViolation, ResourceIdError
from .queue import ProcessQueue
from .runtime import MAX_PRIO, NR_RESOURCES, ProcessState, ProcessStatus, ResourceState


class SimContext:
    """Process arena, readyqueue, resource table, current process and tick counter.

    Only the active policy (and the driver between ticks) mutates process status,
    priority or queue membership.
    """

    READYQUEUE = "readyqueue"

    def __init__(
        self,
        *,
        resource_count: int = NR_RESOURCES,
        max_priority: int = MAX_PRIO,
        bus: EventBus | None = None,
    ) -> None:
        self._membership: dict[int, str] = {}
        self._queue_names: set[str] = set()
        self._wait_queue_names: set[str] = set()
        self._bus = bus
        self.max_priority = max_priority
        self.processes: dict[int, ProcessState] = {}
        self.readyqueue = self.new_queue(self.READYQUEUE)
        self.resources: list[ResourceState] = []
        for rid in range(resource_count):
            waitqueue = self.new_queue(f"resource[{rid}]")
            self._wait_queue_names.add(waitqueue.name)
            self.resources.append(ResourceState(rid=rid, waitqueue=waitqueue))
        self.current: Optional[ProcessState] = None
        self.ticks = 0

    def new_queue(self, name: str) -> ProcessQueue:
        if name in self._queue_names:
            raise ValueError(f"queue {name} already exists")
        self._queue_names.add(name)
        return ProcessQueue(name, self._membership)

    def add_process(self, proc: ProcessState) -> None:
        if proc.pid in self.processes:
            raise ValueError(f"duplicate pid {proc.pid}")
        self.processes[proc.pid] = proc

    def proc(self, pid: int) -> ProcessState:
        try:
            return self.processes[pid]
        except KeyError:
            raise ProtocolViolation(f"unknown process {pid}") from None

    def resource(self, resource_id: int) -> ResourceState:
        if not 0 <= resource_id < len(self.resources):
            raise ResourceIdError(
                f"resource id {resource_id} out of range [0, {len(self.resources)})"
            )
        return self.resources[resource_id]

    def owner_of(self, pid: int) -> str | None:
        """Name of the queue the process is linked in, if any."""
        return self._membership.get(pid)

    def pick(self, queue: ProcessQueue, key: Callable[[ProcessState], int]) -> int | None:
        """Return the first pid in scan order with the greatest ``key``."""
        best: int | None = None
        best_value = 0
        for pid in queue:
            value = key(self.proc(pid))
            if best is None or value > best_value:
                best = pid
                best_value = value
        return best

    def highest_priority(self, queue: ProcessQueue) -> int | None:
        return self.pick(queue, lambda proc: proc.priority)

    def set_priority(self, proc: ProcessState, value: int, *, reason: str) -> None:
        clamped = max(0, min(value, self.max_priority))
        if clamped == proc.priority:
            return
        previous = proc.priority
        proc.priority = clamped
        self.emit(
            EventType.PRIORITY_CHANGE,
            pid=proc.pid,
            payload={"from": previous, "to": clamped, "reason": reason},
        )

    def emit(
        self,
        event_type: EventType,
        *,
        pid: int | None = None,
        resource_id: int | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        if self._bus is None:
            return
        self._bus.publish(
            event_type=event_type,
            time=self.ticks,
            pid=pid,
            resource_id=resource_id,
            payload=payload,
        )

    def snapshot(self) -> dict[str, Any]:
        return {
            "ticks": self.ticks,
            "current": self.current.pid if self.current else None,
            "readyqueue": self.readyqueue.as_list(),
            "processes": {
                pid: {
                    "status": proc.status.value,
                    "age": proc.age,
                    "lifespan": proc.lifespan,
                    "priority": proc.priority,
                    "priority_original": proc.priority_original,
                    "queue": self.owner_of(pid),
                }
                for pid, proc in sorted(self.processes.items())
            },
            "resources": [
                {
                    "id": resource.rid,
                    "owner": resource.owner,
                    "waitqueue": resource.waitqueue.as_list(),
                }
                for resource in self.resources
                if resource.owner is not None or resource.waitqueue
            ],
        }

    def verify(self) -> None:
        """Check queue partition and ownership against every process' status."""
        for pid, proc in self.processes.items():
            linked = self._membership.get(pid)
            if proc.status == ProcessStatus.READY:
                if linked is None or linked in self._wait_queue_names:
                    raise ProtocolViolation(f"ready process {pid} linked in {linked}")
            elif proc.status == ProcessStatus.BLOCKED:
                if linked not in self._wait_queue_names:
                    raise ProtocolViolation(f"blocked process {pid} linked in {linked}")
            elif linked is not None:
                raise ProtocolViolation(f"{proc.status.value} process {pid} linked in {linked}")
            if proc.status == ProcessStatus.RUNNING and self.current is not proc:
                raise ProtocolViolation(f"process {pid} is running but not current")
            if not 0 <= proc.priority <= self.max_priority:
                raise ProtocolViolation(f"process {pid} priority {proc.priority} out of bounds")
        for resource in self.resources:
            if resource.owner is None:
                continue
            owner = self.proc(resource.owner)
            if owner.status == ProcessStatus.TERMINATED or resource.rid not in owner.held:
                raise ProtocolViolation(
                    f"resource {resource.rid} owned by process {owner.pid} that does not hold it"
                )
