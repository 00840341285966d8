"""Schedulers package exports."""

from .base import IScheduler
from .fifo import FIFOScheduler
from .priority import PriorityScheduler
from .registry import available_schedulers, create_scheduler, register_scheduler
from .rr import RoundRobinScheduler
from .sjf import SJFScheduler
from .stcf import STCFScheduler

__all__ = [
    "FIFOScheduler",
    "IScheduler",
    "PriorityScheduler",
    "RoundRobinScheduler",
    "SJFScheduler",
    "STCFScheduler",
    "available_schedulers",
    "create_scheduler",
    "register_scheduler",
]
