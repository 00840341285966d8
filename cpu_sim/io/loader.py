"""Configuration loading, shorthand normalization and validation."""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from pydantic import ValidationError

from cpu_sim.model import ModelSpec

from .schema import CONFIG_SCHEMA


_YAML_SUFFIXES = {".yaml", ".yml"}
_MAX_REPORTED_ISSUES = 8


@dataclass(slots=True)
class ValidationIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path or '<root>'}: {self.message}"


class ConfigError(Exception):
    """Configuration loading/validation error.

    ``issues`` lists every problem found when the error comes from schema or
    model validation; read failures carry a single issue.
    """

    def __init__(self, message: str, issues: list[ValidationIssue] | None = None) -> None:
        super().__init__(message)
        self.issues = issues if issues is not None else [ValidationIssue(path="", message=message)]


def read_document(path: str | Path) -> dict[str, Any]:
    """Parse a YAML or JSON file whose root is a mapping."""
    source = Path(path)
    if not source.exists():
        raise ConfigError(f"config file not found: {path}")
    text = source.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) if source.suffix.lower() in _YAML_SUFFIXES else json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"invalid config syntax: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("config root must be object")
    return data


def write_payload(payload: dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in _YAML_SUFFIXES:
        text = yaml.safe_dump(payload, sort_keys=False)
    else:
        text = json.dumps(payload, indent=2, ensure_ascii=False)
    path.write_text(text, encoding="utf-8")


def _fail(prefix: str, issues: list[ValidationIssue]) -> ConfigError:
    shown = " | ".join(str(issue) for issue in issues[:_MAX_REPORTED_ISSUES])
    return ConfigError(f"{prefix}: {shown}", issues)


class ConfigLoader:
    """Turn a workload document into a validated ``ModelSpec``.

    Validation runs in two passes: the JSON schema catches structural
    mistakes (unknown keys, wrong types, out-of-range numbers), then the
    pydantic model checks cross-field rules such as unique pids and holds
    that fit inside a lifespan.
    """

    SUPPORTED_VERSION = "0.1"

    def __init__(self) -> None:
        self._validator = jsonschema.Draft202012Validator(CONFIG_SCHEMA)

    def load(self, path: str) -> ModelSpec:
        return self.load_data(read_document(path))

    def load_data(self, payload: dict[str, Any]) -> ModelSpec:
        document = self._normalize(payload)
        schema_issues = self.schema_issues(document)
        if schema_issues:
            raise _fail("schema validation failed", schema_issues)
        try:
            return ModelSpec.model_validate(document)
        except ValidationError as exc:
            issues = [
                ValidationIssue(path=".".join(str(part) for part in err["loc"]), message=err["msg"])
                for err in exc.errors()
            ]
            raise _fail("model validation failed", issues) from exc

    def schema_issues(self, payload: dict[str, Any]) -> list[ValidationIssue]:
        errors = sorted(self._validator.iter_errors(payload), key=lambda err: [str(x) for x in err.path])
        return [
            ValidationIssue(path=".".join(str(x) for x in err.path), message=err.message)
            for err in errors
        ]

    def save(self, spec: ModelSpec, path: str) -> None:
        write_payload(spec.model_dump(mode="json", exclude_none=True), Path(path))

    def validate(self, spec_or_path: ModelSpec | str) -> list[ValidationIssue]:
        """Return every problem with a config instead of raising on the first."""
        if isinstance(spec_or_path, ModelSpec):
            return []
        try:
            self.load(spec_or_path)
        except ConfigError as exc:
            return list(exc.issues)
        return []

    def _normalize(self, payload: dict[str, Any]) -> dict[str, Any]:
        document = dict(payload)
        version = str(document.setdefault("version", self.SUPPORTED_VERSION))
        if version != self.SUPPORTED_VERSION:
            raise ConfigError(f"unsupported config version '{version}'")
        # `scheduler: rr` is shorthand for `scheduler: {name: rr}`.
        if isinstance(document.get("scheduler"), str):
            document["scheduler"] = {"name": document["scheduler"]}
        return document
