"""Resource protocol exports."""

from .base import IResourceProtocol
from .fcfs import FCFSResourceProtocol
from .pcp import PCPResourceProtocol
from .pip import PIPResourceProtocol
from .priority import PriorityResourceProtocol
from .registry import create_protocol, register_protocol

__all__ = [
    "FCFSResourceProtocol",
    "IResourceProtocol",
    "PCPResourceProtocol",
    "PIPResourceProtocol",
    "PriorityResourceProtocol",
    "create_protocol",
    "register_protocol",
]
