"""First-in first-out scheduler."""

from __future__ import annotations

from typing import Optional

from cpu_sim.model import ProcessState, SimContext

from .base import IScheduler


class FIFOScheduler(IScheduler):
    """Run processes to completion in arrival order."""

    name = "fifo"
    title = "FIFO"

    def schedule(self, ctx: SimContext) -> Optional[ProcessState]:
        if self.keeps_cpu(ctx):
            return ctx.current
        pid = ctx.readyqueue.peek()
        if pid is None:
            return None
        return self.take(ctx, ctx.readyqueue, pid)
