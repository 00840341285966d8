"""Scheduler interfaces and shared helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from cpu_sim.model import ProcessQueue, ProcessState, ProcessStatus, SimContext
from cpu_sim.protocols import FCFSResourceProtocol, IResourceProtocol


class IScheduler(ABC):
    """Scheduling policy used by the simulation driver.

    A policy bundles a resource protocol (``acquire``/``release``) with its
    pick-next logic and owns an optional auxiliary queue.
    """

    name: str = ""
    title: str = ""

    def __init__(self, protocol: IResourceProtocol | None = None) -> None:
        self.protocol = protocol or FCFSResourceProtocol()
        self.auxiliary: Optional[ProcessQueue] = None

    def initialize(self, ctx: SimContext) -> None:
        """Prepare policy state before the first tick."""

    def finalize(self, ctx: SimContext) -> None:
        """Hand processes parked in the auxiliary queue back to the readyqueue."""
        if self.auxiliary is not None:
            ctx.readyqueue.extend(self.auxiliary.drain())

    def acquire(self, ctx: SimContext, resource_id: int) -> bool:
        return self.protocol.acquire(ctx, resource_id)

    def release(self, ctx: SimContext, resource_id: int) -> None:
        self.protocol.release(ctx, resource_id)

    @abstractmethod
    def schedule(self, ctx: SimContext) -> Optional[ProcessState]:
        """Return the process that occupies the CPU this tick, or None to idle."""

    @staticmethod
    def keeps_cpu(ctx: SimContext) -> bool:
        """True when the current process is neither blocked nor done."""
        current = ctx.current
        if current is None or current.status == ProcessStatus.BLOCKED:
            return False
        return current.age < current.lifespan

    @staticmethod
    def park(queue: ProcessQueue, proc: ProcessState, *, front: bool = False) -> None:
        proc.status = ProcessStatus.READY
        if front:
            queue.appendleft(proc.pid)
        else:
            queue.append(proc.pid)

    @staticmethod
    def take(ctx: SimContext, queue: ProcessQueue, pid: int) -> ProcessState:
        queue.remove(pid)
        proc = ctx.proc(pid)
        proc.status = ProcessStatus.RUNNING
        return proc
