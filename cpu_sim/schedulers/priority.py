"""Priority scheduling family: plain priority, aging, PCP and PIP."""

from __future__ import annotations

from typing import Optional

from cpu_sim.model import ProcessQueue, ProcessState, SimContext
from cpu_sim.protocols import IResourceProtocol, PriorityResourceProtocol

from .base import IScheduler


class PriorityScheduler(IScheduler):
    """Highest effective priority first.

    Processes tied with the running one rotate through the auxiliary (cohort)
    queue instead of letting one of them monopolize the CPU. The four priority
    policies differ only in the resource protocol they install and in
    ``aging``: when enabled, the process that just ran drops back to its
    original priority and every waiting process gains one level per tick.
    """

    def __init__(
        self,
        protocol: IResourceProtocol | None = None,
        *,
        aging: bool = False,
        name: str = "prio",
        title: str = "Priority",
    ) -> None:
        super().__init__(protocol or PriorityResourceProtocol())
        self.aging = aging
        self.name = name
        self.title = title

    def initialize(self, ctx: SimContext) -> None:
        self.auxiliary = ctx.new_queue(f"{self.name}.cohort")

    def schedule(self, ctx: SimContext) -> Optional[ProcessState]:
        cohort = self.auxiliary
        assert cohort is not None, "initialize() must be called before schedule()"
        current = ctx.current
        if self.aging and current is not None:
            self._age(ctx, current, cohort)

        if self.keeps_cpu(ctx):
            assert current is not None
            top = ctx.highest_priority(ctx.readyqueue)
            # An empty readyqueue leaves the current process among the highest.
            top_priority = ctx.proc(top).priority if top is not None else current.priority
            if top_priority > current.priority:
                self.park(ctx.readyqueue, current)
            elif top_priority == current.priority:
                if not ctx.readyqueue and not cohort:
                    return current
                self.park(cohort, current)
            elif self._cohort_priority(ctx, cohort) == current.priority:
                self.park(cohort, current)
            else:
                return current

        return self._pick_next(ctx, cohort)

    def _pick_next(self, ctx: SimContext, cohort: ProcessQueue) -> Optional[ProcessState]:
        if not ctx.readyqueue and cohort:
            ctx.readyqueue.extend(cohort.drain())
        pid = ctx.highest_priority(ctx.readyqueue)
        if pid is None:
            return None

        cohort_priority = self._cohort_priority(ctx, cohort)
        if cohort_priority is not None and cohort_priority != ctx.proc(pid).priority:
            # Priorities moved since the cohort was parked; rejoin and re-pick.
            ctx.readyqueue.extend(cohort.drain())
            pid = ctx.highest_priority(ctx.readyqueue)
            assert pid is not None
        return self.take(ctx, ctx.readyqueue, pid)

    @staticmethod
    def _cohort_priority(ctx: SimContext, cohort: ProcessQueue) -> int | None:
        head = cohort.peek()
        return ctx.proc(head).priority if head is not None else None

    @staticmethod
    def _age(ctx: SimContext, current: ProcessState, cohort: ProcessQueue) -> None:
        ctx.set_priority(current, current.priority_original, reason="aging_reset")
        for queue in (ctx.readyqueue, cohort):
            for pid in queue:
                proc = ctx.proc(pid)
                ctx.set_priority(proc, proc.priority + 1, reason="aging")
