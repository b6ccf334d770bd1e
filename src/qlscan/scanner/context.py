# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan context passed through the per-language pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from qlscan.core.constants import SARIF_SUFFIX
from qlscan.models.finding import Finding
from qlscan.tool.git import RepositoryIdentity


@dataclass
class ScanContext:
    """Mutable state for one orchestrator run.

    Paths are derived from the repository identity so that every language
    gets its own database directory and result document.
    """

    scan_id: str
    workspace: Path
    repository: RepositoryIdentity
    revision: str
    databases_dir: Path
    results_dir: Path
    languages: list[str] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)

    def database_path(self, language: str) -> Path:
        return self.databases_dir / self.repository.name / language

    def results_path(self, language: str) -> Path:
        return self.results_dir / f"{self.repository.prefix}-{language}-{self.revision}{SARIF_SUFFIX}"

    def add_findings(self, new_findings: list[Finding]) -> None:
        self.findings.extend(new_findings)

    def snapshot(self) -> list[Finding]:
        return list(self.findings)
