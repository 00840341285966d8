"""Side-by-side comparison of two metric reports.

Every metric carries a direction so a delta can be judged: waiting and
turnaround shrink when a policy improves, throughput and utilization grow.
Counters such as ``dispatch_count`` are reported but never judged.
"""

from __future__ import annotations

from typing import Any


LOWER_IS_BETTER = "lower"
HIGHER_IS_BETTER = "higher"
NEUTRAL = "neutral"

METRIC_DIRECTIONS: dict[str, str] = {
    "processes_forked": NEUTRAL,
    "processes_completed": HIGHER_IS_BETTER,
    "throughput": HIGHER_IS_BETTER,
    "avg_turnaround_time": LOWER_IS_BETTER,
    "avg_waiting_time": LOWER_IS_BETTER,
    "max_waiting_time": LOWER_IS_BETTER,
    "avg_response_time": LOWER_IS_BETTER,
    "cpu_utilization": HIGHER_IS_BETTER,
    "idle_ticks": LOWER_IS_BETTER,
    "dispatch_count": NEUTRAL,
    "preempt_count": NEUTRAL,
    "block_count": NEUTRAL,
    "priority_change_count": NEUTRAL,
    "event_count": NEUTRAL,
    "max_time": NEUTRAL,
}

DEFAULT_SCALAR_KEYS: tuple[str, ...] = tuple(METRIC_DIRECTIONS)

_EPSILON = 1e-12


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def judge(metric: str, delta: float) -> str:
    """Classify ``delta`` (right minus left) for ``metric``."""
    direction = METRIC_DIRECTIONS.get(metric, NEUTRAL)
    if direction == NEUTRAL:
        return "n/a"
    if abs(delta) <= _EPSILON:
        return "unchanged"
    better = delta < 0 if direction == LOWER_IS_BETTER else delta > 0
    return "improved" if better else "regressed"


def compare_metric(metric: str, left: Any, right: Any) -> dict[str, Any]:
    lhs, rhs = _number(left), _number(right)
    delta = rhs - lhs
    return {
        "metric": metric,
        "direction": METRIC_DIRECTIONS.get(metric, NEUTRAL),
        "left": lhs,
        "right": rhs,
        "delta": delta,
        "delta_ratio_pct": delta / lhs * 100.0 if abs(lhs) > _EPSILON else 0.0,
        "verdict": judge(metric, delta),
    }


def build_compare_report(
    left_metrics: dict[str, Any],
    right_metrics: dict[str, Any],
    *,
    left_label: str = "left",
    right_label: str = "right",
    scalar_keys: tuple[str, ...] = DEFAULT_SCALAR_KEYS,
) -> dict[str, Any]:
    """Diff two metric reports; ``delta`` is always right minus left.

    Missing or non-numeric values count as zero. The ``summary`` block tallies
    verdicts from the right side's point of view.
    """
    rows = [compare_metric(key, left_metrics.get(key), right_metrics.get(key)) for key in scalar_keys]
    summary = {verdict: 0 for verdict in ("improved", "regressed", "unchanged")}
    for row in rows:
        if row["verdict"] in summary:
            summary[row["verdict"]] += 1
    return {
        "left_label": left_label,
        "right_label": right_label,
        "scalar_metrics": rows,
        "summary": summary,
    }


def compare_report_to_rows(report: dict[str, Any]) -> list[dict[str, Any]]:
    """Flatten a compare report for CSV output."""
    labels = {"left_label": report.get("left_label"), "right_label": report.get("right_label")}
    return [
        {"category": "scalar", **labels, **row}
        for row in report.get("scalar_metrics", [])
        if isinstance(row, dict)
    ]
