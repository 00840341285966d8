from __future__ import annotations

from pathlib import Path

import pytest

from cpu_sim.io import ConfigError, ExperimentRunner
from cpu_sim.io.experiment_runner import set_path


EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


def test_shipped_batch_plan_sweeps_every_policy() -> None:
    plan = ExperimentRunner().load_plan(EXAMPLES / "batch_policies.yaml")
    assert plan.base_config == (EXAMPLES / "pip_inversion.yaml").resolve()
    assert plan.audit is True
    assert plan.until is None
    assignments = list(plan.combinations())
    assert [a["scheduler.name"] for a in assignments] == ["fifo", "sjf", "stcf", "rr", "prio", "pa", "pcp", "pip"]


def test_combinations_are_sorted_by_path(tmp_path: Path) -> None:
    (tmp_path / "base.yaml").write_text((EXAMPLES / "fifo_basic.yaml").read_text(encoding="utf-8"), encoding="utf-8")
    batch = tmp_path / "batch.yaml"
    batch.write_text(
        'base_config: "base.yaml"\nfactors:\n  sim.seed: [1, 2]\n  scheduler.name: [rr]\n',
        encoding="utf-8",
    )
    plan = ExperimentRunner().load_plan(batch)
    assert list(plan.combinations()) == [
        {"scheduler.name": "rr", "sim.seed": 1},
        {"scheduler.name": "rr", "sim.seed": 2},
    ]
    assert plan.output_dir == (tmp_path / "artifacts" / "batch").resolve()


def test_until_must_be_integer(tmp_path: Path) -> None:
    (tmp_path / "base.yaml").write_text((EXAMPLES / "fifo_basic.yaml").read_text(encoding="utf-8"), encoding="utf-8")
    batch = tmp_path / "batch.yaml"
    batch.write_text('base_config: "base.yaml"\nuntil: true\nschedulers: [fifo]\n', encoding="utf-8")
    with pytest.raises(ConfigError, match="until"):
        ExperimentRunner().load_plan(batch)


def test_set_path_creates_mappings_and_fans_out() -> None:
    payload = {"processes": [{"pid": 0}, {"pid": 1}]}
    set_path(payload, "sim.seed", 9)
    set_path(payload, "processes.*.priority", 4)
    assert payload == {
        "processes": [{"pid": 0, "priority": 4}, {"pid": 1, "priority": 4}],
        "sim": {"seed": 9},
    }


@pytest.mark.parametrize(
    ("path", "message"),
    [
        ("processes.*", "terminal"),
        ("processes.0.priority", "without wildcard"),
        ("sim.*.seed", "expects list"),
    ],
)
def test_set_path_rejects_bad_paths(path: str, message: str) -> None:
    payload = {"processes": [{"pid": 0}], "sim": {"seed": 1}}
    with pytest.raises(ConfigError, match=message):
        set_path(payload, path, 1)
