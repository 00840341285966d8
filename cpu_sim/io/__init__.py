"""I/O exports."""

from .artifacts import read_metrics, write_json, write_jsonl, write_rows_csv
from .experiment_runner import BatchPlan, BatchRunSummary, ExperimentRunner
from .loader import ConfigError, ConfigLoader, ValidationIssue, read_document, write_payload
from .schema import CONFIG_SCHEMA
from .workload import generate_workload

__all__ = [
    "BatchPlan",
    "BatchRunSummary",
    "CONFIG_SCHEMA",
    "ConfigError",
    "ConfigLoader",
    "ExperimentRunner",
    "ValidationIssue",
    "generate_workload",
    "read_document",
    "read_metrics",
    "write_json",
    "write_jsonl",
    "write_payload",
    "write_rows_csv",
]
