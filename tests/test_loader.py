from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from cpu_sim.io import ConfigError, ConfigLoader
from cpu_sim.model import MAX_PRIO, NR_RESOURCES, ModelSpec


EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


def _base_payload() -> dict[str, Any]:
    return {
        "version": "0.1",
        "resource_count": 2,
        "processes": [
            {
                "pid": 0,
                "arrival": 0,
                "lifespan": 5,
                "priority": 3,
                "acquires": [{"resource": 0, "at": 1, "duration": 2}],
            },
            {"pid": 1, "arrival": 2, "lifespan": 2},
        ],
        "scheduler": {"name": "pip", "params": {}},
        "sim": {"duration": 20, "seed": 7},
    }


def test_loader_applies_defaults() -> None:
    payload = _base_payload()
    del payload["version"]
    del payload["resource_count"]
    del payload["sim"]
    spec = ConfigLoader().load_data(payload)

    assert spec.version == "0.1"
    assert spec.resource_count == NR_RESOURCES
    assert spec.max_priority == MAX_PRIO
    assert spec.sim.duration == 10_000
    assert spec.sim.verify is True
    assert spec.processes[1].priority == 0
    assert spec.processes[1].acquires == []


def test_loader_accepts_scheduler_shorthand() -> None:
    payload = _base_payload()
    payload["scheduler"] = "rr"
    spec = ConfigLoader().load_data(payload)
    assert spec.scheduler.name == "rr"
    assert spec.scheduler.params == {}


def test_loader_rejects_unsupported_version() -> None:
    payload = _base_payload()
    payload["version"] = "0.2"
    with pytest.raises(ConfigError, match="unsupported config version"):
        ConfigLoader().load_data(payload)


@pytest.mark.parametrize(
    ("mutate", "fragment"),
    [
        (lambda p: p.pop("processes"), "processes"),
        (lambda p: p.update(processes=[]), "processes"),
        (lambda p: p["processes"][0].update(lifespan=0), "lifespan"),
        (lambda p: p["processes"][0].update(arrival=-1), "arrival"),
        (lambda p: p["processes"][0].update(quantum=2), "quantum"),
        (lambda p: p["processes"][0]["acquires"][0].update(duration=0), "duration"),
        (lambda p: p["sim"].update(duration=0), "duration"),
        (lambda p: p["scheduler"].update(params={"event_id_mode": "uuid"}), "event_id_mode"),
    ],
)
def test_loader_schema_errors(mutate, fragment: str) -> None:
    payload = _base_payload()
    mutate(payload)
    with pytest.raises(ConfigError, match="schema validation failed") as exc:
        ConfigLoader().load_data(payload)
    assert fragment in str(exc.value)


def test_loader_reports_semantic_errors_as_config_error() -> None:
    payload = _base_payload()
    payload["processes"][1]["pid"] = 0
    with pytest.raises(ConfigError, match="duplicate processes.pid"):
        ConfigLoader().load_data(payload)


def test_loader_reads_yaml_and_json(tmp_path: Path) -> None:
    payload = _base_payload()
    yaml_path = tmp_path / "config.yaml"
    json_path = tmp_path / "config.json"
    yaml_path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    json_path.write_text(json.dumps(payload), encoding="utf-8")

    loader = ConfigLoader()
    assert loader.load(str(yaml_path)) == loader.load(str(json_path))


def test_loader_read_errors(tmp_path: Path) -> None:
    loader = ConfigLoader()
    with pytest.raises(ConfigError, match="not found"):
        loader.load(str(tmp_path / "missing.yaml"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid config syntax"):
        loader.load(str(broken))

    listing = tmp_path / "list.yaml"
    listing.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="root must be object"):
        loader.load(str(listing))


def test_loader_save_round_trip(tmp_path: Path) -> None:
    loader = ConfigLoader()
    spec = loader.load_data(_base_payload())
    out = tmp_path / "nested" / "saved.yaml"
    loader.save(spec, str(out))
    assert loader.load(str(out)) == spec


def test_validate_collects_issues(tmp_path: Path) -> None:
    loader = ConfigLoader()
    assert loader.validate(str(EXAMPLES / "pip_inversion.yaml")) == []
    assert loader.validate(loader.load_data(_base_payload())) == []

    issues = loader.validate(str(tmp_path / "missing.yaml"))
    assert len(issues) == 1
    assert "not found" in issues[0].message


def test_validate_reports_every_schema_issue_with_path(tmp_path: Path) -> None:
    payload = _base_payload()
    payload["processes"][0]["lifespan"] = 0
    payload["processes"][1]["arrival"] = -3
    config = tmp_path / "bad.json"
    config.write_text(json.dumps(payload), encoding="utf-8")

    issues = ConfigLoader().validate(str(config))
    assert [issue.path for issue in issues] == ["processes.0.lifespan", "processes.1.arrival"]


def test_model_errors_carry_issue_list() -> None:
    payload = _base_payload()
    payload["processes"][1]["pid"] = 0
    with pytest.raises(ConfigError, match="model validation failed") as exc:
        ConfigLoader().load_data(payload)
    assert len(exc.value.issues) == 1
    assert "duplicate processes.pid" in exc.value.issues[0].message


@pytest.mark.parametrize("path", sorted(EXAMPLES.glob("*.yaml")))
def test_examples_load(path: Path) -> None:
    if path.name.startswith("batch_"):
        pytest.skip("batch configs are read by the experiment runner")
    spec = ConfigLoader().load(str(path))
    assert isinstance(spec, ModelSpec)
