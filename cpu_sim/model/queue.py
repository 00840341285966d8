"""Process handle queue with single-owner membership."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .errors import ProtocolViolation


class ProcessQueue:
    """Ordered collection of process ids.

    Queues created from the same membership map cooperate: a pid can be linked
    in at most one of them at a time, and linking it twice raises
    ``ProtocolViolation``.
    """

    def __init__(self, name: str, membership: dict[int, str] | None = None) -> None:
        self.name = name
        self._items: list[int] = []
        self._membership = membership if membership is not None else {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._items))

    def __contains__(self, pid: object) -> bool:
        return pid in self._items

    def __repr__(self) -> str:
        return f"ProcessQueue({self.name!r}, {self._items!r})"

    def append(self, pid: int) -> None:
        self._link(pid)
        self._items.append(pid)

    def appendleft(self, pid: int) -> None:
        self._link(pid)
        self._items.insert(0, pid)

    def extend(self, pids: Iterable[int]) -> None:
        for pid in pids:
            self.append(pid)

    def peek(self) -> int | None:
        return self._items[0] if self._items else None

    def popleft(self) -> int:
        if not self._items:
            raise IndexError(f"pop from empty queue {self.name}")
        pid = self._items.pop(0)
        self._unlink(pid)
        return pid

    def remove(self, pid: int) -> None:
        try:
            self._items.remove(pid)
        except ValueError:
            raise ProtocolViolation(f"process {pid} is not linked in {self.name}") from None
        self._unlink(pid)

    def drain(self) -> list[int]:
        """Unlink and return every pid, preserving order."""
        pids = list(self._items)
        self._items.clear()
        for pid in pids:
            self._unlink(pid)
        return pids

    def as_list(self) -> list[int]:
        return list(self._items)

    def _link(self, pid: int) -> None:
        owner = self._membership.get(pid)
        if owner is not None:
            raise ProtocolViolation(
                f"process {pid} is already linked in {owner}, cannot link into {self.name}"
            )
        self._membership[pid] = self.name

    def _unlink(self, pid: int) -> None:
        self._membership.pop(pid, None)
