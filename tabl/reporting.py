"""
Module: reporting
Purpose: Logging and structured report generation utilities.
"""

import json
import os
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from typing import Any, List, Sequence

from .exceptions import ReportError
from .models.columnspec import ColumnSpec
from .models.pathmapping import OutputPolicy, PathMapping
from .models.summary import AggregateSummary

LOG_FILE_ENV = "TABL_LOG_FILE"
REPORT_SCHEMA_VERSION = "1.0"

_LOG_FILE: str | None = None


def configure_log_file(cli_override: str | None = None) -> str | None:
    """
    Select the log file. Preference order: CLI override > environment variable.
    Logging is disabled when neither is set so read-only commands never write.

    Raises:
        ReportError: If the log file cannot be opened for appending.
    """
    global _LOG_FILE
    _LOG_FILE = None
    path = cli_override or os.getenv(LOG_FILE_ENV) or None
    if not path:
        return None
    target = os.path.abspath(path)
    try:
        os.makedirs(os.path.dirname(target) or ".", exist_ok=True)
        with open(target, "a", encoding="utf-8"):
            pass
    except OSError as exc:
        raise ReportError(target, exc.strerror or str(exc)) from exc
    _LOG_FILE = target
    return _LOG_FILE


def current_log_file() -> str | None:
    return _LOG_FILE


def write_log(entries: List[str], outfile: str | None = None):
    """
    Append entries to logfile.

    Raises:
        ReportError: If the file cannot be written. A failing configured log
            file is disabled first so the failure itself can still be reported.
    """
    global _LOG_FILE
    target = outfile or _LOG_FILE
    if not target:
        return
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        os.makedirs(os.path.dirname(os.path.abspath(target)) or ".", exist_ok=True)
        with open(target, "a", encoding="utf-8") as handle:
            for entry in entries:
                normalized = entry if entry.startswith("[") else f"[INFO] {entry}"
                handle.write(f"[{timestamp}] {normalized}\n")
    except OSError as exc:
        if target == _LOG_FILE:
            _LOG_FILE = None
        raise ReportError(target, exc.strerror or str(exc)) from exc


class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        if is_dataclass(o):
            return asdict(o)
        return super().default(o)


def summary_report(summary: AggregateSummary, *, include_files: bool = False) -> dict[str, Any]:
    """
    Structured view of an AggregateSummary for JSON output.
    """
    report: dict[str, Any] = {
        "schema_version": REPORT_SCHEMA_VERSION,
        "total_files": summary.total_files,
        "total_rows": summary.total_rows,
        "total_bytes": summary.total_bytes,
        "schemas": [
            {
                "columns": [{"name": name, "type": dtype} for name, dtype in group.schema.columns],
                "file_count": group.file_count,
                "total_rows": group.total_rows,
                "total_bytes": group.total_bytes,
                "paths": list(group.paths),
            }
            for group in summary.groups
        ],
        "skipped": list(summary.skipped),
    }
    if include_files:
        report["files"] = [
            {"path": item.path, "rows": item.num_rows, "bytes": item.num_bytes}
            for item in summary.files
        ]
    return report


def plan_report(
    action: str,
    columns: Sequence[ColumnSpec],
    mapping: PathMapping,
    policy: OutputPolicy,
    existing_outputs: int,
) -> dict[str, Any]:
    """
    Structured view of an edit preview (drop/insert) for JSON output.
    """
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "action": action,
        "columns": [str(column) for column in columns],
        "in_place": policy.in_place,
        "output_dir": os.path.abspath(policy.output_dir) if policy.output_dir else None,
        "files": len(mapping),
        "existing_outputs": existing_outputs,
        "pairs": [{"input": src, "output": dst} for src, dst in mapping],
    }


def write_json_report(report: dict[str, Any], outfile: str):
    """
    Save structured JSON summary.

    Raises:
        ReportError: If the report cannot be written.
    """
    try:
        os.makedirs(os.path.dirname(os.path.abspath(outfile)) or ".", exist_ok=True)
        with open(outfile, "w", encoding="utf-8") as handle:
            json.dump(report, handle, indent=2, cls=EnhancedJSONEncoder)
    except OSError as exc:
        raise ReportError(os.path.abspath(outfile), exc.strerror or str(exc)) from exc
