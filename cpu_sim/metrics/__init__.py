"""Metrics exports."""

from .base import IMetric
from .core import SchedulingMetrics

__all__ = ["IMetric", "SchedulingMetrics"]
