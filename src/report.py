"""Structured report building, JSON export and plain-text rendering."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from fix.planner import FixOutcome, suggested_commands
from versioning.models import Classification

logger = logging.getLogger(__name__)

_ISSUE_SCHEMA = {
    "type": "object",
    "required": ["consumer", "peer", "required", "current", "detail"],
    "properties": {
        "consumer": {"type": "string"},
        "peer": {"type": "string"},
        "required": {"type": "string"},
        "current": {"type": ["string", "null"]},
        "severity": {"type": "string", "enum": ["missing", "conflict", "warning"]},
        "optional": {"type": "boolean"},
        "detail": {"type": "string"},
    },
}

REPORT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["manager", "errors", "warnings", "optional", "commands"],
    "properties": {
        "manager": {"type": "string"},
        "errors": {"type": "array", "items": _ISSUE_SCHEMA},
        "warnings": {"type": "array", "items": _ISSUE_SCHEMA},
        "optional": {"type": "array", "items": _ISSUE_SCHEMA},
        "commands": {"type": "object", "additionalProperties": {"type": "string"}},
        "fix": {"type": ["object", "null"]},
    },
}


class ReportError(ValueError):
    """Raised when a report fails schema validation."""


def build_report(classification: Classification, manager: str,
                 outcome: Optional[FixOutcome] = None) -> Dict[str, Any]:
    """Assemble the report: issue buckets, suggested commands and fix results."""
    return {
        "manager": manager,
        "errors": [i.to_dict() for i in classification.errors],
        "warnings": [i.to_dict() for i in classification.warnings],
        "optional": [i.to_dict() for i in classification.optional],
        "commands": suggested_commands(classification.errors, manager),
        "fix": outcome.to_dict() if outcome is not None else None,
    }


def validate_report(report: Dict[str, Any]) -> None:
    """Strictly validate a report; raise ReportError on the first problem."""
    validator = Draft7Validator(REPORT_SCHEMA)
    errs = sorted(validator.iter_errors(report), key=lambda e: list(e.path))
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise ReportError(f"Invalid report at '{path}': {first.message}")


def export_json(report: Dict[str, Any], path: str) -> None:
    """Validate and write the report to ``path``.

    Raises:
        ReportError: If the report does not match REPORT_SCHEMA.
        OSError: If the file cannot be written.
    """
    validate_report(report)
    with open(path, 'w', encoding='utf-8') as file:
        json.dump(report, file, ensure_ascii=False, indent=4)
    logger.info("JSON report has been successfully exported at: %s", path)


def _section(title: str, entries: List[Dict[str, Any]]) -> List[str]:
    if not entries:
        return []
    lines = ["", f"{title}:"]
    for entry in entries:
        lines.append(f"- {entry['detail']}")
    return lines


def render_text(report: Dict[str, Any]) -> str:
    """Render a report as plain text for the console."""
    lines: List[str] = []
    lines += _section("Peer dependency errors", report["errors"])
    lines += _section("Warnings", report["warnings"])
    lines += _section("Optional peers", report["optional"])

    if report["commands"]:
        lines += ["", "Suggested fix:"]
        lines += [f"  {cmd}" for cmd in report["commands"].values()]

    fix = report.get("fix")
    if fix:
        if fix["failed"]:
            lines += ["", "Failed install batches:"]
            lines += [f"- {' '.join(batch)}" for batch in fix["failed"]]
        if fix["needs_manual"]:
            lines += ["", "The following dependencies may need manual installation:"]
            lines += [f"- {spec}" for spec in fix["needs_manual"]]

    if not lines:
        return "No peer dependency issues found!"
    return "\n".join(lines).lstrip("\n")
