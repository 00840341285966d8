"""Seeded synthetic workload generation."""

from __future__ import annotations

from random import Random
from typing import Any

from cpu_sim.model import MAX_PRIO


def generate_workload(
    count: int,
    *,
    seed: int = 42,
    resource_count: int = 4,
    max_arrival: int = 20,
    min_lifespan: int = 2,
    max_lifespan: int = 12,
    priority_levels: int = 10,
    acquire_probability: float = 0.5,
    scheduler: str = "fifo",
) -> dict[str, Any]:
    """Build a config payload with random arrivals, lifespans, priorities and holds.

    Each process holds at most one resource, so generated workloads never
    deadlock. The same seed always yields the same payload.
    """
    if count < 1:
        raise ValueError("count must be >= 1")
    if not 1 <= min_lifespan <= max_lifespan:
        raise ValueError("lifespan bounds must satisfy 1 <= min_lifespan <= max_lifespan")
    if not 0.0 <= acquire_probability <= 1.0:
        raise ValueError("acquire_probability must be within [0, 1]")

    rng = Random(seed)
    top_priority = max(0, min(priority_levels - 1, MAX_PRIO))
    processes: list[dict[str, Any]] = []
    for pid in range(count):
        lifespan = rng.randint(min_lifespan, max_lifespan)
        process: dict[str, Any] = {
            "pid": pid,
            "arrival": rng.randint(0, max(0, max_arrival)),
            "lifespan": lifespan,
            "priority": rng.randint(0, top_priority),
            "acquires": [],
        }
        if resource_count > 0 and rng.random() < acquire_probability:
            at = rng.randrange(lifespan)
            process["acquires"].append(
                {
                    "resource": rng.randrange(resource_count),
                    "at": at,
                    "duration": rng.randint(1, lifespan - at),
                }
            )
        processes.append(process)

    return {
        "version": "0.1",
        "resource_count": resource_count,
        "max_priority": MAX_PRIO,
        "processes": processes,
        "scheduler": {"name": scheduler, "params": {}},
        "sim": {"duration": max_arrival + count * max_lifespan + 1, "seed": seed},
    }
