"""Priority Ceiling Protocol (PCP) resource protocol."""

from __future__ import annotations

from cpu_sim.model import ProcessState, ResourceState, SimContext

from .priority import PriorityResourceProtocol


class PCPResourceProtocol(PriorityResourceProtocol):
    """Owners run at the system maximum priority while they hold a resource."""

    name = "pcp"

    def on_granted(self, ctx: SimContext, resource: ResourceState, proc: ProcessState) -> None:  # noqa: ARG002
        ctx.set_priority(proc, ctx.max_priority, reason="pcp_ceiling")

    def on_releasing(self, ctx: SimContext, resource: ResourceState, proc: ProcessState) -> None:  # noqa: ARG002
        ctx.set_priority(proc, proc.priority_original, reason="pcp_restore")
