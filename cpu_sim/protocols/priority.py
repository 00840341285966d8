"""Priority-aware resource protocol."""

from __future__ import annotations

from cpu_sim.model import ResourceState, SimContext

from .fcfs import FCFSResourceProtocol


class PriorityResourceProtocol(FCFSResourceProtocol):
    """Wake the highest-priority waiter; the wait queue itself stays in arrival order."""

    name = "prio"

    def select_waiter(self, ctx: SimContext, resource: ResourceState) -> int:
        pid = ctx.highest_priority(resource.waitqueue)
        assert pid is not None
        return pid
