"""Simulation event definitions."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    PROCESS_FORKED = "ProcessForked"
    DISPATCH = "Dispatch"
    RUN = "Run"
    PREEMPT = "Preempt"
    IDLE = "Idle"
    RESOURCE_ACQUIRE = "ResourceAcquire"
    RESOURCE_RELEASE = "ResourceRelease"
    BLOCKED = "Blocked"
    WOKEN = "Woken"
    PRIORITY_CHANGE = "PriorityChange"
    PROCESS_EXIT = "ProcessExit"
    ERROR = "Error"


class SimEvent(BaseModel):
    """Normalized event envelope for tracing and metrics."""

    model_config = ConfigDict(extra="forbid")

    event_id: str
    seq: int = Field(ge=0)
    time: int = Field(ge=0)
    type: EventType
    pid: Optional[int] = None
    resource_id: Optional[int] = None
    payload: dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)
