"""Writers and readers for run artifacts (event logs, metric files, summaries)."""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .loader import ConfigError, write_payload


def write_jsonl(path: str | Path, rows: Iterable[dict[str, Any]]) -> Path:
    """Write one JSON document per line."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row, ensure_ascii=False))
            f.write("\n")
    return output


def write_json(path: str | Path, payload: dict[str, Any]) -> Path:
    output = Path(path)
    write_payload(payload, output)
    return output


def write_rows_csv(path: str | Path, rows: list[dict[str, Any]]) -> Path:
    """Write dict rows as CSV; the header is the union of keys in first-seen order."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    header = list(dict.fromkeys(key for row in rows for key in row))
    with output.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=header)
        writer.writeheader()
        writer.writerows(rows)
    return output


def read_metrics(path: str | Path) -> dict[str, Any]:
    source = Path(path)
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"failed to read metrics file {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"metrics file must be object: {source}")
    return payload
