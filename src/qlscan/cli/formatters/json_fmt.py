# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""JSON output formatter."""

from __future__ import annotations

import json

from qlscan.models.finding import Finding
from qlscan.models.scan import ScanResult


def format_json(result: ScanResult) -> str:
    """Return a scan run as formatted JSON string."""
    return result.model_dump_json(indent=2)


def format_findings_json(findings: list[Finding]) -> str:
    data = [f.model_dump(mode="json", exclude_none=True) for f in findings]
    return json.dumps(data, indent=2)
