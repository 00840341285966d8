"""Command line front end: validate, run, batch-run, compare, generate, schedulers."""

from __future__ import annotations

import argparse
from pathlib import Path

from cpu_sim.analysis import build_audit_report, build_compare_report, compare_report_to_rows
from cpu_sim.core import SimEngine
from cpu_sim.events import EventType, SimEvent
from cpu_sim.io import (
    ConfigError,
    ConfigLoader,
    ExperimentRunner,
    generate_workload,
    read_metrics,
    write_json,
    write_jsonl,
    write_payload,
    write_rows_csv,
)
from cpu_sim.model import ModelSpec, SimulationError
from cpu_sim.schedulers import available_schedulers, create_scheduler


TRACE_TYPES = (EventType.RUN, EventType.IDLE, EventType.ERROR)


def _print_tick(event: SimEvent) -> None:
    if event.type == EventType.RUN:
        detail = f"pid {event.pid} (prio {event.payload.get('priority')})"
    elif event.type == EventType.IDLE:
        detail = "idle"
    else:
        detail = f"error {event.payload}"
    print(f"{event.time:>6}: {detail}")


def _load_spec(path: str, scheduler: str | None = None) -> ModelSpec:
    spec = ConfigLoader().load(path)
    if scheduler:
        spec = spec.model_copy(
            update={"scheduler": spec.scheduler.model_copy(update={"name": scheduler})}
        )
    return spec


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        # Scheduler names only resolve when an engine is built.
        SimEngine().build(_load_spec(args.config))
    except (ConfigError, ValueError) as exc:
        print(f"[ERROR] {args.config}: {exc}")
        return 1
    print("[OK] config validation passed")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    if args.until is not None and args.until < 0:
        print("[ERROR] --until must be >= 0")
        return 1

    engine = SimEngine()
    if not args.quiet:
        engine.subscribe(_print_tick, types=TRACE_TYPES)
    try:
        spec = _load_spec(args.config, args.scheduler)
        engine.build(spec)
    except (ConfigError, ValueError) as exc:
        print(f"[ERROR] {exc}")
        return 1

    try:
        engine.run(until=args.until)
    except SimulationError as exc:
        print(f"[ERROR] simulation aborted at t={engine.now}: {exc}")
        return 2

    events = [event.model_dump(mode="json") for event in engine.events]
    metrics = engine.metric_report()
    write_jsonl(args.events_out, events)
    write_json(args.metrics_out, metrics)
    if args.snapshot_out:
        write_json(args.snapshot_out, engine.snapshot())

    status = 0
    if args.audit_out:
        audit = build_audit_report(events, scheduler_name=engine.scheduler.name)
        write_json(args.audit_out, audit)
        if audit["status"] != "pass":
            print(f"[ERROR] simulation audit failed with {audit['issue_count']} issues, report={args.audit_out}")
            status = 2

    stop = next((event for event in reversed(engine.events) if event.type == EventType.ERROR), None)
    if stop is not None:
        print(f"[ERROR] simulation stopped at t={stop.time}: {stop.payload}")
        status = 2
    if status == 0:
        print(
            f"[OK] simulation completed, scheduler={engine.scheduler.title}, "
            f"events={len(events)}, now={engine.now}, metrics={args.metrics_out}"
        )
    return status


def cmd_batch_run(args: argparse.Namespace) -> int:
    try:
        summary = ExperimentRunner().run_batch(
            args.batch_config,
            output_dir=args.output_dir,
            summary_csv=args.summary_csv,
            summary_json=args.summary_json,
        )
    except ConfigError as exc:
        print(f"[ERROR] {exc}")
        return 1

    print(
        f"[OK] batch finished, runs={summary.total_runs}, ok={summary.succeeded_runs}, "
        f"failed={summary.failed_runs}, json={summary.summary_json}"
    )
    if summary.failed_runs and args.strict_fail_on_error:
        print(f"[ERROR] {summary.failed_runs} batch runs failed (strict mode)")
        return 2
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    try:
        left, right = read_metrics(args.left_metrics), read_metrics(args.right_metrics)
    except ConfigError as exc:
        print(f"[ERROR] {exc}")
        return 1

    report = build_compare_report(left, right, left_label=args.left_label, right_label=args.right_label)
    if args.out_json:
        write_json(args.out_json, report)
    if args.out_csv:
        write_rows_csv(args.out_csv, compare_report_to_rows(report))

    tally = report["summary"]
    print(
        f"[OK] {args.right_label} vs {args.left_label}: improved={tally['improved']}, "
        f"regressed={tally['regressed']}, unchanged={tally['unchanged']}"
    )
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    try:
        payload = generate_workload(
            args.count,
            seed=args.seed,
            resource_count=args.resources,
            scheduler=args.scheduler,
        )
        ConfigLoader().load_data(payload)
    except (ConfigError, ValueError) as exc:
        print(f"[ERROR] {exc}")
        return 1

    output = Path(args.output)
    write_payload(payload, output)
    print(f"[OK] workload generated, processes={args.count}, out={output}")
    return 0


def cmd_schedulers(args: argparse.Namespace) -> int:  # noqa: ARG001
    for name in available_schedulers():
        scheduler = create_scheduler(name)
        print(f"{name:<16}{scheduler.title}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cpu-sim", description="CPU scheduling simulation CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    def command(name: str, handler, help_text: str) -> argparse.ArgumentParser:
        child = sub.add_parser(name, help=help_text)
        child.set_defaults(func=handler)
        return child

    validate = command("validate", cmd_validate, "validate a workload config")
    validate.add_argument("-c", "--config", required=True, help="workload YAML/JSON")

    run = command("run", cmd_run, "run one simulation")
    run.add_argument("-c", "--config", required=True, help="workload YAML/JSON")
    run.add_argument("--scheduler", help="override the configured policy")
    run.add_argument("--until", type=int, help="stop after this many ticks")
    run.add_argument("--events-out", default="artifacts/events.jsonl", help="event log (JSONL)")
    run.add_argument("--metrics-out", default="artifacts/metrics.json", help="metric report (JSON)")
    run.add_argument("--audit-out", help="write an audit report and fail on violations")
    run.add_argument("--snapshot-out", help="write the final scheduler state (JSON)")
    run.add_argument("-q", "--quiet", action="store_true", help="suppress the per-tick trace")

    batch = command("batch-run", cmd_batch_run, "sweep factors over one base workload")
    batch.add_argument("-b", "--batch-config", required=True, help="batch YAML/JSON")
    batch.add_argument("--output-dir", help="directory for per-run artifacts")
    batch.add_argument("--summary-csv", help="summary CSV path")
    batch.add_argument("--summary-json", help="summary JSON path")
    batch.add_argument("--strict-fail-on-error", action="store_true", help="exit 2 if any run fails")

    compare = command("compare", cmd_compare, "diff two metric reports")
    compare.add_argument("--left-metrics", required=True)
    compare.add_argument("--right-metrics", required=True)
    compare.add_argument("--left-label", default="left")
    compare.add_argument("--right-label", default="right")
    compare.add_argument("--out-json", help="compare report JSON path")
    compare.add_argument("--out-csv", help="compare rows CSV path")

    generate = command("generate", cmd_generate, "write a seeded random workload")
    generate.add_argument("-o", "--output", required=True, help="output YAML/JSON path")
    generate.add_argument("--count", type=int, default=8, help="number of processes")
    generate.add_argument("--seed", type=int, default=42)
    generate.add_argument("--resources", type=int, default=4, help="resource count")
    generate.add_argument("--scheduler", default="fifo", help="policy to embed")

    command("schedulers", cmd_schedulers, "list registered policies")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
