"""Simulation core exports."""

from .engine import SimEngine
from .interfaces import ISimEngine

__all__ = ["ISimEngine", "SimEngine"]
