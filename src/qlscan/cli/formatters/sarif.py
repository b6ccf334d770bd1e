# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SARIF 2.1.0 output formatter for merged multi-language findings."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from qlscan import __version__
from qlscan.core.constants import Severity
from qlscan.models.finding import Finding

SEVERITY_TO_SARIF_LEVEL = {
    Severity.CRITICAL: "error",
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "note",
    Severity.INFO: "note",
}

# security-severity scores that bucket back to the same Severity when re-read
SEVERITY_TO_SCORE = {
    Severity.CRITICAL: "9.5",
    Severity.HIGH: "8.0",
    Severity.MEDIUM: "6.0",
    Severity.LOW: "4.0",
    Severity.INFO: "0.0",
}


def _artifact_uri(path: str, root: str | None) -> str:
    if root:
        rel = os.path.relpath(path, root)
        if not rel.startswith(".."):
            return Path(rel).as_posix()
    return Path(path).as_uri()


def _region(start_line: int, start_column: int, end_line: int, end_column: int) -> dict[str, int]:
    return {
        "startLine": start_line,
        "startColumn": start_column,
        "endLine": end_line,
        "endColumn": end_column,
    }


def findings_to_sarif(findings: list[Finding], root: str | None = None) -> dict[str, Any]:
    """Build one SARIF run holding every finding, one rule per rule id.

    A rule carries a ``security-severity`` score only when all of its
    findings share one severity; otherwise readers fall back to each
    result's ``level``.
    """
    rules: dict[str, dict[str, Any]] = {}
    rule_severities: dict[str, set[Severity]] = {}
    results: list[dict[str, Any]] = []

    for finding in findings:
        if finding.rule_id not in rules:
            rules[finding.rule_id] = {
                "id": finding.rule_id,
                "defaultConfiguration": {
                    "level": SEVERITY_TO_SARIF_LEVEL.get(finding.severity, "warning"),
                },
            }
        rule_severities.setdefault(finding.rule_id, set()).add(finding.severity)

        loc = finding.location
        sarif_result: dict[str, Any] = {
            "ruleId": finding.rule_id,
            "level": SEVERITY_TO_SARIF_LEVEL.get(finding.severity, "warning"),
            "message": {"text": finding.message},
            "locations": [{
                "physicalLocation": {
                    "artifactLocation": {"uri": _artifact_uri(loc.file, root)},
                    "region": _region(loc.start_line, loc.start_column, loc.end_line, loc.end_column),
                }
            }],
            "properties": {"language": finding.language, "severity": str(finding.severity)},
        }

        if finding.flow_steps:
            steps = []
            for step in finding.flow_steps:
                location: dict[str, Any] = {
                    "physicalLocation": {
                        "artifactLocation": {"uri": _artifact_uri(step.file, root)},
                        "region": _region(
                            step.start_line, step.start_column, step.end_line, step.end_column
                        ),
                    }
                }
                if step.message:
                    location["message"] = {"text": step.message}
                steps.append({"location": location})
            sarif_result["codeFlows"] = [{"threadFlows": [{"locations": steps}]}]

        results.append(sarif_result)

    for rule_id, severities in rule_severities.items():
        if len(severities) == 1:
            (severity,) = severities
            rules[rule_id]["properties"] = {"security-severity": SEVERITY_TO_SCORE[severity]}

    return {
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "qlscan",
                        "version": __version__,
                        "rules": list(rules.values()),
                    }
                },
                "results": results,
            }
        ],
    }


def format_sarif(findings: list[Finding], root: str | None = None) -> str:
    """Return findings as a SARIF 2.1.0 JSON string."""
    return json.dumps(findings_to_sarif(findings, root), indent=2)
