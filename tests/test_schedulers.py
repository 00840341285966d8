from __future__ import annotations

import pytest

from cpu_sim.model import MAX_PRIO, ProcessState, ProcessStatus, SimContext
from cpu_sim.protocols import (
    FCFSResourceProtocol,
    PCPResourceProtocol,
    PIPResourceProtocol,
    PriorityResourceProtocol,
)
from cpu_sim.schedulers import (
    FIFOScheduler,
    IScheduler,
    PriorityScheduler,
    RoundRobinScheduler,
    SJFScheduler,
    STCFScheduler,
    available_schedulers,
    create_scheduler,
)


def _proc(pid: int, lifespan: int, priority: int = 0, age: int = 0) -> ProcessState:
    return ProcessState(pid=pid, lifespan=lifespan, priority_original=priority, age=age)


def _setup(
    scheduler: IScheduler,
    *ready: ProcessState,
    current: ProcessState | None = None,
    max_priority: int = MAX_PRIO,
) -> SimContext:
    ctx = SimContext(resource_count=2, max_priority=max_priority)
    for proc in ready:
        ctx.add_process(proc)
        ctx.readyqueue.append(proc.pid)
    if current is not None:
        ctx.add_process(current)
        current.status = ProcessStatus.RUNNING
        ctx.current = current
    scheduler.initialize(ctx)
    return ctx


def _tick(scheduler: IScheduler, ctx: SimContext) -> int | None:
    chosen = scheduler.schedule(ctx)
    ctx.current = chosen
    if chosen is None:
        return None
    chosen.age += 1
    return chosen.pid


def _ticks(scheduler: IScheduler, ctx: SimContext, count: int) -> list[int | None]:
    return [_tick(scheduler, ctx) for _ in range(count)]


def test_fifo_runs_to_completion_in_arrival_order() -> None:
    scheduler = FIFOScheduler()
    ctx = _setup(scheduler, _proc(0, 2), _proc(1, 1), _proc(2, 1))
    assert _ticks(scheduler, ctx, 5) == [0, 0, 1, 2, None]


def test_fifo_moves_on_when_current_blocks() -> None:
    scheduler = FIFOScheduler()
    current = _proc(0, 5)
    ctx = _setup(scheduler, _proc(1, 2), current=current)
    current.status = ProcessStatus.BLOCKED

    chosen = scheduler.schedule(ctx)
    assert chosen is not None and chosen.pid == 1
    assert chosen.status == ProcessStatus.RUNNING
    assert len(ctx.readyqueue) == 0


def test_sjf_selects_shortest_job() -> None:
    scheduler = SJFScheduler()
    ctx = _setup(scheduler, _proc(0, 10), _proc(1, 2), _proc(2, 7))

    chosen = scheduler.schedule(ctx)
    assert chosen is not None and chosen.pid == 1
    assert ctx.readyqueue.as_list() == [0, 2]


def test_sjf_does_not_preempt_and_breaks_ties_by_scan_order() -> None:
    scheduler = SJFScheduler()
    ctx = _setup(scheduler, _proc(1, 3), _proc(2, 3), current=_proc(0, 9, age=1))
    assert _ticks(scheduler, ctx, 3) == [0, 0, 0]

    ctx.current = None
    assert _tick(scheduler, ctx) == 1


def test_stcf_keeps_current_when_no_one_is_strictly_shorter() -> None:
    scheduler = STCFScheduler()
    current = _proc(0, 10, age=8)
    ctx = _setup(scheduler, _proc(1, 3), current=current)

    assert scheduler.schedule(ctx) is current
    assert ctx.readyqueue.as_list() == [1]


def test_stcf_keeps_current_on_tie() -> None:
    scheduler = STCFScheduler()
    current = _proc(0, 10, age=7)
    ctx = _setup(scheduler, _proc(1, 3), current=current)
    assert scheduler.schedule(ctx) is current


def test_stcf_preempts_to_readyqueue_front() -> None:
    scheduler = STCFScheduler()
    current = _proc(0, 10, age=2)
    ctx = _setup(scheduler, _proc(1, 6), _proc(2, 1), current=current)

    chosen = scheduler.schedule(ctx)
    assert chosen is not None and chosen.pid == 2
    assert current.status == ProcessStatus.READY
    assert ctx.readyqueue.as_list() == [0, 1]


def test_round_robin_rotates_through_expired_queue() -> None:
    scheduler = RoundRobinScheduler()
    ctx = _setup(scheduler, _proc(0, 3), _proc(1, 1), _proc(2, 2))
    assert _ticks(scheduler, ctx, 7) == [0, 1, 2, 0, 2, 0, None]


def test_round_robin_parks_runnable_current_in_auxiliary_queue() -> None:
    scheduler = RoundRobinScheduler()
    ctx = _setup(scheduler, _proc(1, 2), current=_proc(0, 4, age=1))

    chosen = scheduler.schedule(ctx)
    assert chosen is not None and chosen.pid == 1
    assert scheduler.auxiliary is not None
    assert scheduler.auxiliary.as_list() == [0]
    assert ctx.owner_of(0) == "rr.expired"


def test_round_robin_requires_initialize() -> None:
    with pytest.raises(AssertionError):
        RoundRobinScheduler().schedule(SimContext())


def test_priority_rotates_equal_priority_cohort() -> None:
    scheduler = create_scheduler("prio")
    ctx = _setup(scheduler, _proc(0, 3, 1), _proc(1, 2, 3), _proc(2, 2, 3), _proc(3, 2, 3))
    assert _ticks(scheduler, ctx, 10) == [1, 2, 3, 1, 2, 3, 0, 0, 0, None]


def test_priority_lone_highest_keeps_running() -> None:
    scheduler = create_scheduler("prio")
    current = _proc(0, 5, 4)
    ctx = _setup(scheduler, _proc(1, 5, 2), current=current)
    assert _ticks(scheduler, ctx, 3) == [0, 0, 0]
    assert ctx.readyqueue.as_list() == [1]


def test_priority_higher_arrival_preempts_to_readyqueue_tail() -> None:
    scheduler = create_scheduler("prio")
    current = _proc(0, 5, 1)
    ctx = _setup(scheduler, _proc(1, 5, 5), _proc(2, 5, 0), current=current)

    chosen = scheduler.schedule(ctx)
    assert chosen is not None and chosen.pid == 1
    assert ctx.readyqueue.as_list() == [2, 0]
    assert scheduler.auxiliary is not None and len(scheduler.auxiliary) == 0


def test_priority_aging_lets_low_priority_process_run() -> None:
    scheduler = create_scheduler("pa")
    high = _proc(0, 12, 5)
    low = _proc(1, 2, 0)
    ctx = _setup(scheduler, high, low, max_priority=10)

    seen: list[int] = []
    picks: list[int | None] = []
    for _ in range(6):
        picks.append(_tick(scheduler, ctx))
        seen.append(low.priority)

    assert picks == [0, 0, 0, 0, 0, 1]
    # Waiting raises priority by one per tick; running resets it next tick.
    assert seen == [0, 1, 2, 3, 4, 5]
    assert _tick(scheduler, ctx) == 0
    assert low.priority == 0
    assert high.priority == 6


def test_priority_aging_clamps_at_max_priority() -> None:
    scheduler = create_scheduler("pa")
    waiting = _proc(1, 2, 2)
    ctx = _setup(scheduler, waiting, current=_proc(0, 20, 3), max_priority=3)
    _ticks(scheduler, ctx, 5)
    assert waiting.priority <= 3


def test_priority_rejoins_stale_cohort_before_picking() -> None:
    scheduler = create_scheduler("prio")
    ctx = _setup(scheduler, _proc(0, 4, 2), _proc(1, 4, 2), _proc(2, 4, 1))
    assert _ticks(scheduler, ctx, 2) == [0, 1]
    assert scheduler.auxiliary is not None
    assert scheduler.auxiliary.as_list() == [0]

    # A boost behind the scheduler's back makes the parked process stale.
    ctx.set_priority(ctx.proc(2), 9, reason="test")
    assert _tick(scheduler, ctx) == 2
    assert len(scheduler.auxiliary) == 0
    assert ctx.readyqueue.as_list() == [1, 0]


def test_finalize_returns_parked_processes() -> None:
    scheduler = RoundRobinScheduler()
    ctx = _setup(scheduler, _proc(1, 2), current=_proc(0, 4, age=1))
    scheduler.schedule(ctx)
    scheduler.finalize(ctx)
    assert ctx.readyqueue.as_list() == [0]


def test_registry_builds_every_policy() -> None:
    names = set(available_schedulers())
    assert {"fifo", "sjf", "stcf", "rr", "prio", "pa", "pcp", "pip"} <= names

    assert isinstance(create_scheduler("FIFO").protocol, FCFSResourceProtocol)
    assert isinstance(create_scheduler("prio").protocol, PriorityResourceProtocol)
    assert isinstance(create_scheduler("pcp").protocol, PCPResourceProtocol)
    assert isinstance(create_scheduler("pip").protocol, PIPResourceProtocol)

    aging = create_scheduler("priority_aging")
    assert isinstance(aging, PriorityScheduler) and aging.aging is True
    assert create_scheduler("pcp").title == "Priority + PCP Protocol"
    assert create_scheduler("srtf").title == "Shortest Time-to-Complete First"
    with pytest.raises(ValueError, match="unknown scheduler"):
        create_scheduler("edf")


def test_each_policy_gets_its_own_auxiliary_queue() -> None:
    first = create_scheduler("pip")
    second = create_scheduler("pip")
    assert first is not second
    ctx_a = _setup(first)
    ctx_b = _setup(second)
    assert first.auxiliary is not second.auxiliary
    assert ctx_a is not ctx_b
