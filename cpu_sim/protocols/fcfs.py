"""First-come-first-served resource protocol."""

from __future__ import annotations

from cpu_sim.events import EventType
from cpu_sim.model import ProcessState, ProcessStatus, ProtocolViolation, ResourceState, SimContext

from .base import IResourceProtocol


class FCFSResourceProtocol(IResourceProtocol):
    """Exclusive resources served in request order, ignoring priority.

    Subclasses vary the behavior through ``select_waiter`` and the
    ``on_granted``/``on_blocked``/``on_releasing`` hooks.
    """

    name = "fcfs"

    def acquire(self, ctx: SimContext, resource_id: int) -> bool:
        resource = ctx.resource(resource_id)
        proc = self.caller(ctx, "acquire")

        if resource.owner is None:
            resource.owner = proc.pid
            proc.held.append(resource.rid)
            ctx.emit(EventType.RESOURCE_ACQUIRE, pid=proc.pid, resource_id=resource.rid)
            self.on_granted(ctx, resource, proc)
            return True
        if resource.owner == proc.pid:
            raise ProtocolViolation(
                f"process {proc.pid} re-acquires resource {resource.rid} it already owns"
            )

        proc.status = ProcessStatus.BLOCKED
        resource.waitqueue.append(proc.pid)
        ctx.emit(
            EventType.BLOCKED,
            pid=proc.pid,
            resource_id=resource.rid,
            payload={"owner": resource.owner},
        )
        self.on_blocked(ctx, resource, proc)
        return False

    def release(self, ctx: SimContext, resource_id: int) -> None:
        resource = ctx.resource(resource_id)
        proc = self.caller(ctx, "release")
        if resource.owner != proc.pid:
            raise ProtocolViolation(
                f"process {proc.pid} releases resource {resource.rid} owned by {resource.owner}"
            )

        self.on_releasing(ctx, resource, proc)
        resource.owner = None
        proc.held.remove(resource.rid)

        woken = self.select_waiter(ctx, resource) if resource.waitqueue else None
        ctx.emit(
            EventType.RESOURCE_RELEASE,
            pid=proc.pid,
            resource_id=resource.rid,
            payload={"woken": woken},
        )
        if woken is not None:
            self._wake(ctx, resource, woken)

    def select_waiter(self, ctx: SimContext, resource: ResourceState) -> int:  # noqa: ARG002
        """Pick the waiter to wake; the earliest arrival by default."""
        pid = resource.waitqueue.peek()
        assert pid is not None
        return pid

    def on_granted(self, ctx: SimContext, resource: ResourceState, proc: ProcessState) -> None:  # noqa: ARG002
        return

    def on_blocked(self, ctx: SimContext, resource: ResourceState, proc: ProcessState) -> None:  # noqa: ARG002
        return

    def on_releasing(self, ctx: SimContext, resource: ResourceState, proc: ProcessState) -> None:  # noqa: ARG002
        return

    @staticmethod
    def _wake(ctx: SimContext, resource: ResourceState, pid: int) -> None:
        waiter = ctx.proc(pid)
        if waiter.status != ProcessStatus.BLOCKED:
            raise ProtocolViolation(
                f"waiter {pid} on resource {resource.rid} is {waiter.status.value}, not blocked"
            )
        resource.waitqueue.remove(pid)
        waiter.status = ProcessStatus.READY
        ctx.readyqueue.append(pid)
        ctx.emit(EventType.WOKEN, pid=pid, resource_id=resource.rid)
