"""Priority Inheritance Protocol (PIP) resource protocol."""

from __future__ import annotations

from cpu_sim.model import ProcessState, ResourceState, SimContext

from .priority import PriorityResourceProtocol


class PIPResourceProtocol(PriorityResourceProtocol):
    """Owners inherit the priority of the highest-priority process blocked on them."""

    name = "pip"

    def on_blocked(self, ctx: SimContext, resource: ResourceState, proc: ProcessState) -> None:
        top = ctx.highest_priority(resource.waitqueue)
        if top is None or ctx.proc(top).priority != proc.priority:
            return
        assert resource.owner is not None
        owner = ctx.proc(resource.owner)
        # Inheritance only ever raises the owner.
        if proc.priority > owner.priority:
            ctx.set_priority(owner, proc.priority, reason="pip_inherit")

    def on_releasing(self, ctx: SimContext, resource: ResourceState, proc: ProcessState) -> None:  # noqa: ARG002
        ctx.set_priority(proc, proc.priority_original, reason="pip_restore")
