"""Shortest time-to-complete first scheduler."""

from __future__ import annotations

from typing import Optional

from cpu_sim.model import ProcessState, SimContext

from .base import IScheduler


def _shortest_remaining(proc: ProcessState) -> int:
    return -proc.remaining


class STCFScheduler(IScheduler):
    """Preemptive shortest-remaining-time; ties keep the running process."""

    name = "stcf"
    title = "Shortest Time-to-Complete First"

    def schedule(self, ctx: SimContext) -> Optional[ProcessState]:
        current = ctx.current
        if self.keeps_cpu(ctx):
            assert current is not None
            shortest = ctx.pick(ctx.readyqueue, _shortest_remaining)
            if shortest is None or ctx.proc(shortest).remaining >= current.remaining:
                return current
            self.park(ctx.readyqueue, current, front=True)

        pid = ctx.pick(ctx.readyqueue, _shortest_remaining)
        if pid is None:
            return None
        return self.take(ctx, ctx.readyqueue, pid)
