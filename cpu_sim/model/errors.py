"""Simulation integrity errors."""

from __future__ import annotations


class SimulationError(RuntimeError):
    """Base class for fatal simulation errors."""


class ProtocolViolation(SimulationError):
    """A scheduling or resource invariant was broken; the run cannot continue."""


class ResourceIdError(SimulationError, IndexError):
    """Resource id outside of the resource table."""
