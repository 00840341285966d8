"""Post-simulation audit checks over the event stream."""

from __future__ import annotations

from collections import defaultdict
from typing import Any


_RESTORING_SCHEDULERS = {"pcp", "pip"}


def _issue(rule: str, message: str, event: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {
        "rule": rule,
        "severity": "error",
        "message": message,
        "event_id": event.get("event_id"),
        "time": event.get("time"),
        **extra,
    }


def build_audit_report(
    events: list[dict[str, Any]],
    *,
    scheduler_name: str | None = None,
) -> dict[str, Any]:
    """Replay resource events and check mutual exclusion, wakeups and restoration."""

    issues: list[dict[str, Any]] = []
    owners: dict[int, int] = {}
    held: defaultdict[int, set[int]] = defaultdict(set)
    blocked: defaultdict[int, list[int]] = defaultdict(list)
    original_priority: dict[int, int] = {}
    priority: dict[int, int] = {}
    restore_priorities = str(scheduler_name or "").strip().lower() in _RESTORING_SCHEDULERS

    rules = (
        "mutual_exclusion",
        "wakeup_accounting",
        "resource_release_balance",
        "priority_restoration",
    )

    for event in events:
        event_type = event.get("type")
        pid = event.get("pid")
        resource_id = event.get("resource_id")
        payload = event.get("payload") or {}

        if event_type == "ProcessForked" and pid is not None:
            base = payload.get("priority")
            if isinstance(base, int):
                original_priority[pid] = base
                priority[pid] = base

        elif event_type == "PriorityChange" and pid is not None:
            value = payload.get("to")
            if isinstance(value, int):
                priority[pid] = value

        elif event_type == "ResourceAcquire" and resource_id is not None:
            owner = owners.get(resource_id)
            if owner is not None:
                issues.append(
                    _issue(
                        "mutual_exclusion",
                        "resource acquired while owned by another process",
                        event,
                        resource_id=resource_id,
                        owner=owner,
                        pid=pid,
                    )
                )
            owners[resource_id] = pid
            held[pid].add(resource_id)

        elif event_type == "ResourceRelease" and resource_id is not None:
            owner = owners.get(resource_id)
            if owner != pid:
                issues.append(
                    _issue(
                        "mutual_exclusion",
                        "resource released by a process that does not own it",
                        event,
                        resource_id=resource_id,
                        owner=owner,
                        pid=pid,
                    )
                )
            owners.pop(resource_id, None)
            held[pid].discard(resource_id)

            woken = payload.get("woken")
            if woken is None and blocked[resource_id]:
                issues.append(
                    _issue(
                        "wakeup_accounting",
                        "release left waiters blocked without waking one",
                        event,
                        resource_id=resource_id,
                        waiters=list(blocked[resource_id]),
                    )
                )
            elif woken is not None and woken not in blocked[resource_id]:
                issues.append(
                    _issue(
                        "wakeup_accounting",
                        "release woke a process that was not waiting on the resource",
                        event,
                        resource_id=resource_id,
                        woken=woken,
                    )
                )

            if restore_priorities and pid in original_priority:
                if priority.get(pid) != original_priority[pid]:
                    issues.append(
                        _issue(
                            "priority_restoration",
                            "owner priority not restored on release",
                            event,
                            pid=pid,
                            priority=priority.get(pid),
                            original=original_priority[pid],
                        )
                    )

        elif event_type == "Blocked" and resource_id is not None:
            blocked[resource_id].append(pid)

        elif event_type == "Woken" and resource_id is not None:
            if pid in blocked[resource_id]:
                blocked[resource_id].remove(pid)
            else:
                issues.append(
                    _issue(
                        "wakeup_accounting",
                        "process woken without being blocked",
                        event,
                        resource_id=resource_id,
                        pid=pid,
                    )
                )

        elif event_type == "ProcessExit" and held.get(pid):
            issues.append(
                _issue(
                    "resource_release_balance",
                    "process exited while holding resources",
                    event,
                    pid=pid,
                    resources=sorted(held[pid]),
                )
            )

    failed_rules = {issue["rule"] for issue in issues}
    checks = {rule: {"passed": rule not in failed_rules} for rule in rules}
    checks["priority_restoration"]["applied"] = restore_priorities

    return {
        "status": "fail" if issues else "pass",
        "scheduler": scheduler_name,
        "issue_count": len(issues),
        "issues": issues,
        "checks": checks,
    }
