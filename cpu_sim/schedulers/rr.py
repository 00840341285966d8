"""Round-robin scheduler."""

from __future__ import annotations

from typing import Optional

from cpu_sim.model import ProcessState, SimContext

from .base import IScheduler


class RoundRobinScheduler(IScheduler):
    """One-tick quantum.

    A process that used its quantum is parked in the auxiliary queue, so every
    process in the readyqueue gets a turn before anyone runs twice. The
    auxiliary queue is drained back in order once the readyqueue empties.
    """

    name = "rr"
    title = "Round-Robin"

    def initialize(self, ctx: SimContext) -> None:
        self.auxiliary = ctx.new_queue(f"{self.name}.expired")

    def schedule(self, ctx: SimContext) -> Optional[ProcessState]:
        assert self.auxiliary is not None, "initialize() must be called before schedule()"
        if self.keeps_cpu(ctx):
            assert ctx.current is not None
            self.park(self.auxiliary, ctx.current)

        if not ctx.readyqueue:
            ctx.readyqueue.extend(self.auxiliary.drain())
        pid = ctx.readyqueue.peek()
        if pid is None:
            return None
        return self.take(ctx, ctx.readyqueue, pid)
