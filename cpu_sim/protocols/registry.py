"""Resource protocol registry."""

from __future__ import annotations

from collections.abc import Callable

from .base import IResourceProtocol
from .fcfs import FCFSResourceProtocol
from .pcp import PCPResourceProtocol
from .pip import PIPResourceProtocol
from .priority import PriorityResourceProtocol


ProtocolFactory = Callable[[], IResourceProtocol]


_REGISTRY: dict[str, ProtocolFactory] = {
    "fcfs": FCFSResourceProtocol,
    "prio": PriorityResourceProtocol,
    "priority": PriorityResourceProtocol,
    "pcp": PCPResourceProtocol,
    "pip": PIPResourceProtocol,
}


def register_protocol(name: str, factory: ProtocolFactory) -> None:
    _REGISTRY[name.lower()] = factory


def create_protocol(name: str) -> IResourceProtocol:
    key = name.lower()
    if key not in _REGISTRY:
        raise ValueError(f"unknown resource protocol {name}")
    return _REGISTRY[key]()
