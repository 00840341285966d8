from __future__ import annotations

from cpu_sim.analysis import build_audit_report


def _event(event_type: str, pid: int | None = None, resource_id: int | None = None, **payload) -> dict:
    return {
        "event_id": f"e-{event_type}-{pid}",
        "time": 0,
        "type": event_type,
        "pid": pid,
        "resource_id": resource_id,
        "payload": payload,
    }


def test_audit_passes_for_balanced_resource_events() -> None:
    events = [
        _event("ProcessForked", 0, lifespan=3, priority=1),
        _event("ResourceAcquire", 0, 0),
        _event("ResourceRelease", 0, 0, woken=None),
        _event("ProcessExit", 0),
    ]
    report = build_audit_report(events, scheduler_name="fifo")
    assert report["status"] == "pass"
    assert report["issue_count"] == 0
    assert all(check["passed"] for check in report["checks"].values())
    assert report["checks"]["priority_restoration"]["applied"] is False


def test_audit_detects_double_acquire() -> None:
    events = [
        _event("ResourceAcquire", 0, 1),
        _event("ResourceAcquire", 1, 1),
    ]
    report = build_audit_report(events)
    assert report["status"] == "fail"
    assert report["issues"][0]["rule"] == "mutual_exclusion"
    assert report["issues"][0]["owner"] == 0


def test_audit_detects_release_by_non_owner() -> None:
    events = [
        _event("ResourceAcquire", 0, 1),
        _event("ResourceRelease", 2, 1, woken=None),
    ]
    report = build_audit_report(events)
    assert [issue["rule"] for issue in report["issues"]] == ["mutual_exclusion"]


def test_audit_detects_lost_wakeup() -> None:
    events = [
        _event("ResourceAcquire", 0, 0),
        _event("Blocked", 1, 0, owner=0),
        _event("ResourceRelease", 0, 0, woken=None),
    ]
    report = build_audit_report(events)
    assert report["checks"]["wakeup_accounting"]["passed"] is False
    assert report["issues"][0]["waiters"] == [1]


def test_audit_detects_spurious_wakeup() -> None:
    events = [
        _event("ResourceAcquire", 0, 0),
        _event("ResourceRelease", 0, 0, woken=3),
        _event("Woken", 3, 0),
    ]
    report = build_audit_report(events)
    rules = [issue["rule"] for issue in report["issues"]]
    assert rules == ["wakeup_accounting", "wakeup_accounting"]


def test_audit_detects_exit_while_holding() -> None:
    events = [
        _event("ResourceAcquire", 0, 2),
        _event("ProcessExit", 0),
    ]
    report = build_audit_report(events)
    assert report["issues"][0]["rule"] == "resource_release_balance"
    assert report["issues"][0]["resources"] == [2]


def test_audit_checks_priority_restoration_for_ceiling_policies() -> None:
    events = [
        _event("ProcessForked", 0, lifespan=4, priority=2),
        _event("ResourceAcquire", 0, 0),
        _event("PriorityChange", 0, **{"from": 2, "to": 100, "reason": "pcp_ceiling"}),
        _event("ResourceRelease", 0, 0, woken=None),
    ]
    report = build_audit_report(events, scheduler_name="pcp")
    assert report["status"] == "fail"
    assert report["issues"][0]["rule"] == "priority_restoration"
    assert report["issues"][0]["priority"] == 100

    # The same stream under a policy without boosts is not checked.
    assert build_audit_report(events, scheduler_name="prio")["status"] == "pass"
