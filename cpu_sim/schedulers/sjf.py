"""Shortest-job-first scheduler."""

from __future__ import annotations

from typing import Optional

from cpu_sim.model import ProcessState, SimContext

from .base import IScheduler


class SJFScheduler(IScheduler):
    """Non-preemptive; picks the ready process with the smallest total lifespan."""

    name = "sjf"
    title = "Shortest-Job First"

    def schedule(self, ctx: SimContext) -> Optional[ProcessState]:
        if self.keeps_cpu(ctx):
            return ctx.current
        pid = ctx.pick(ctx.readyqueue, lambda proc: -proc.lifespan)
        if pid is None:
            return None
        return self.take(ctx, ctx.readyqueue, pid)
