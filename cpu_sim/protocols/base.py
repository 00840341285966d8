"""Resource protocol abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod

from cpu_sim.model import ProtocolViolation, ProcessState, SimContext


class IResourceProtocol(ABC):
    """Resource protocol interface for mutual exclusion and priority rules."""

    name: str = ""

    @abstractmethod
    def acquire(self, ctx: SimContext, resource_id: int) -> bool:
        """Try to take a resource for the current process.

        Returns False after moving the caller into the resource's wait queue.
        """

    @abstractmethod
    def release(self, ctx: SimContext, resource_id: int) -> None:
        """Give up a resource owned by the current process and wake one waiter."""

    @staticmethod
    def caller(ctx: SimContext, operation: str) -> ProcessState:
        if ctx.current is None:
            raise ProtocolViolation(f"{operation} invoked without a current process")
        return ctx.current
