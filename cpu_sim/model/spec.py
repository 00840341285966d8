"""Configuration domain models and semantic validation."""

from __future__ import annotations

from collections import defaultdict

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .runtime import MAX_PRIO, NR_RESOURCES


class AcquireSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    resource: int = Field(ge=0)
    at: int = Field(ge=0)
    duration: int = Field(ge=1)


class ProcessSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pid: int = Field(ge=0)
    arrival: int = Field(default=0, ge=0)
    lifespan: int = Field(ge=1)
    priority: int = Field(default=0, ge=0)
    acquires: list[AcquireSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_acquires(self) -> "ProcessSpec":
        holds: dict[int, list[tuple[int, int]]] = defaultdict(list)
        for item in self.acquires:
            if item.at >= self.lifespan:
                raise ValueError(
                    f"process {self.pid} acquires resource {item.resource} at age {item.at} "
                    f"beyond lifespan {self.lifespan}"
                )
            if item.at + item.duration > self.lifespan:
                raise ValueError(
                    f"process {self.pid} holds resource {item.resource} past its lifespan"
                )
            holds[item.resource].append((item.at, item.at + item.duration))
        for resource, spans in holds.items():
            spans.sort()
            for (_, prev_end), (start, _) in zip(spans, spans[1:]):
                if start < prev_end:
                    raise ValueError(
                        f"process {self.pid} has overlapping holds on resource {resource}"
                    )
        return self


class SchedulerSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    params: dict = Field(default_factory=dict)


class SimSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    duration: int = Field(default=10_000, gt=0)
    seed: int = 42
    verify: bool = True


class ModelSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str
    resource_count: int = Field(default=NR_RESOURCES, ge=0)
    max_priority: int = Field(default=MAX_PRIO, ge=0)
    processes: list[ProcessSpec] = Field(min_length=1)
    scheduler: SchedulerSpec
    sim: SimSpec = Field(default_factory=SimSpec)

    @model_validator(mode="after")
    def validate_semantics(self) -> "ModelSpec":
        pids = [proc.pid for proc in self.processes]
        if len(pids) != len(set(pids)):
            raise ValueError("duplicate processes.pid")
        for proc in self.processes:
            if proc.priority > self.max_priority:
                raise ValueError(
                    f"process {proc.pid} priority {proc.priority} exceeds max_priority {self.max_priority}"
                )
            for item in proc.acquires:
                if item.resource >= self.resource_count:
                    raise ValueError(
                        f"process {proc.pid} references unknown resource {item.resource}"
                    )
        return self
