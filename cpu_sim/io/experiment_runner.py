"""Batch experiment runner for comparing policies over identical workloads."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from itertools import product
from pathlib import Path
from typing import Any, Iterator

from cpu_sim.analysis import build_audit_report
from cpu_sim.core import SimEngine
from cpu_sim.model import SimulationError

from .artifacts import write_json, write_jsonl, write_rows_csv
from .loader import ConfigError, ConfigLoader, read_document


@dataclass(slots=True)
class BatchRunSummary:
    summary_csv: Path
    summary_json: Path
    total_runs: int
    succeeded_runs: int
    failed_runs: int


@dataclass(slots=True)
class BatchPlan:
    """A parsed batch file: one base workload and the factor grid applied to it."""

    source: Path
    base_config: Path
    base_payload: dict[str, Any]
    factors: dict[str, list[Any]]
    output_dir: Path
    until: int | None = None
    audit: bool = False
    rows: list[dict[str, Any]] = field(default_factory=list)

    def combinations(self) -> Iterator[dict[str, Any]]:
        """Yield factor assignments in a stable order (paths sorted, values as listed)."""
        paths = sorted(self.factors)
        for values in product(*(self.factors[path] for path in paths)):
            yield dict(zip(paths, values, strict=True))


class ExperimentRunner:
    """Sweep factor grids over a base config and persist one summary per batch.

    ``schedulers: [fifo, rr, ...]`` is shorthand for a ``scheduler.name``
    factor, so every policy sees the same arrivals, lifespans and holds.
    """

    SUPPORTED_VERSION = "0.1"
    SCHEDULER_FACTOR = "scheduler.name"

    def __init__(self, loader: ConfigLoader | None = None) -> None:
        self._loader = loader or ConfigLoader()

    def load_plan(self, batch_config_path: str | Path, *, output_dir: str | None = None) -> BatchPlan:
        source = Path(batch_config_path)
        raw = self._read(source)
        version = str(raw.get("version", self.SUPPORTED_VERSION))
        if version != self.SUPPORTED_VERSION:
            raise ConfigError(f"unsupported batch version '{version}'")

        base_ref = raw.get("base_config")
        if not isinstance(base_ref, str) or not base_ref:
            raise ConfigError("batch config requires non-empty 'base_config'")
        base_config = _resolve(source.parent, base_ref)

        until = raw.get("until")
        # bool is an int subclass; reject it explicitly.
        if until is not None and (isinstance(until, bool) or not isinstance(until, int)):
            raise ConfigError("batch 'until' must be integer when provided")

        out_ref = output_dir or raw.get("output_dir")
        out_dir = (
            _resolve(source.parent, out_ref)
            if isinstance(out_ref, str) and out_ref
            else (source.parent / "artifacts" / "batch").resolve()
        )

        return BatchPlan(
            source=source,
            base_config=base_config,
            base_payload=self._read(base_config),
            factors=self._factors(raw),
            output_dir=out_dir,
            until=until,
            audit=bool(raw.get("audit", False)),
        )

    def run_batch(
        self,
        batch_config_path: str,
        *,
        output_dir: str | None = None,
        summary_csv: str | None = None,
        summary_json: str | None = None,
    ) -> BatchRunSummary:
        plan = self.load_plan(batch_config_path, output_dir=output_dir)
        plan.output_dir.mkdir(parents=True, exist_ok=True)
        for index, assignment in enumerate(plan.combinations()):
            plan.rows.append(self._run_one(plan, f"run_{index:03d}", assignment))

        csv_path = self._summary_path(plan, summary_csv, "summary.csv")
        json_path = self._summary_path(plan, summary_json, "summary.json")
        ok = sum(row["status"] == "ok" for row in plan.rows)
        write_rows_csv(csv_path, plan.rows)
        write_json(
            json_path,
            {
                "version": self.SUPPORTED_VERSION,
                "base_config": str(plan.base_config),
                "factors": plan.factors,
                "until": plan.until,
                "total_runs": len(plan.rows),
                "succeeded_runs": ok,
                "failed_runs": len(plan.rows) - ok,
                "runs": plan.rows,
            },
        )
        return BatchRunSummary(
            summary_csv=csv_path,
            summary_json=json_path,
            total_runs=len(plan.rows),
            succeeded_runs=ok,
            failed_runs=len(plan.rows) - ok,
        )

    def _run_one(self, plan: BatchPlan, run_id: str, assignment: dict[str, Any]) -> dict[str, Any]:
        row: dict[str, Any] = {"run_id": run_id, **assignment}
        payload = copy.deepcopy(plan.base_payload)
        run_dir = plan.output_dir / run_id
        try:
            for path, value in assignment.items():
                set_path(payload, path, value)
            engine = SimEngine()
            engine.build(self._loader.load_data(payload))
            engine.run(until=plan.until)
        except (ConfigError, SimulationError, ValueError) as exc:
            row.update(status="error", error=str(exc))
            return row

        events = [event.model_dump(mode="json") for event in engine.events]
        metrics = engine.metric_report()
        row["events_path"] = str(write_jsonl(run_dir / "events.jsonl", events))
        row["metrics_path"] = str(write_json(run_dir / "metrics.json", metrics))
        row["status"] = "ok"

        stops = [event for event in events if event["type"] == "Error"]
        if stops:
            row.update(status="error", error=str(stops[-1]["payload"].get("reason", "error")))
        if plan.audit:
            audit = build_audit_report(events, scheduler_name=engine.scheduler.name)
            write_json(run_dir / "audit.json", audit)
            row["audit_status"] = audit["status"]
            if audit["status"] != "pass" and row["status"] == "ok":
                row.update(status="error", error=f"audit failed ({audit['issue_count']} issues)")
        row.update(metrics)
        return row

    def _factors(self, raw: dict[str, Any]) -> dict[str, list[Any]]:
        factors = raw.get("factors") or {}
        if not isinstance(factors, dict):
            raise ConfigError("batch 'factors' must be an object")
        result: dict[str, list[Any]] = {}
        for path, values in factors.items():
            if not isinstance(path, str) or not path:
                raise ConfigError("factor path must be non-empty string")
            if not isinstance(values, list) or not values:
                raise ConfigError(f"factor '{path}' must provide non-empty list")
            result[path] = list(values)

        schedulers = raw.get("schedulers")
        if schedulers is not None:
            if not isinstance(schedulers, list) or not schedulers:
                raise ConfigError("batch 'schedulers' must be a non-empty list")
            if self.SCHEDULER_FACTOR in result:
                raise ConfigError(f"'schedulers' conflicts with factor '{self.SCHEDULER_FACTOR}'")
            result[self.SCHEDULER_FACTOR] = [str(name) for name in schedulers]

        if not result:
            raise ConfigError("batch config requires 'factors' or 'schedulers'")
        return result

    @staticmethod
    def _summary_path(plan: BatchPlan, override: str | None, default_name: str) -> Path:
        if isinstance(override, str) and override:
            return _resolve(plan.source.parent, override)
        return plan.output_dir / default_name

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        try:
            return read_document(path)
        except ConfigError as exc:
            raise ConfigError(f"{exc} ({path})") from exc


def set_path(node: Any, path: str, value: Any) -> None:
    """Assign ``value`` at a dotted ``path``; a ``*`` segment fans out over a list.

    Missing mapping segments are created. ``processes.*.priority`` sets the
    priority of every process.
    """
    head, _, rest = path.partition(".")
    if head in {"*", "[*]"}:
        if not isinstance(node, list):
            raise ConfigError(f"factor path wildcard expects list node, got {type(node).__name__}")
        if not rest:
            raise ConfigError("wildcard cannot be terminal in factor path")
        for item in node:
            set_path(item, rest, value)
        return
    if isinstance(node, list):
        raise ConfigError("factor path cannot address list without wildcard")
    if not isinstance(node, dict):
        raise ConfigError(f"cannot apply factor path to node type {type(node).__name__}")
    if not rest:
        node[head] = value
        return
    child = node.get(head)
    if not isinstance(child, dict) and not isinstance(child, list):
        child = node[head] = {}
    set_path(child, rest, value)


def _resolve(base_dir: Path, raw_path: str) -> Path:
    path = Path(raw_path)
    return path if path.is_absolute() else (base_dir / path).resolve()
