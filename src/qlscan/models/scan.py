# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan run bookkeeping models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field, computed_field

from qlscan.core.constants import SEVERITY_WEIGHTS, ScanStatus, Severity, Stage
from qlscan.models.finding import Finding


class LanguageFailure(BaseModel):
    """A language whose build or analysis failed and was skipped."""

    language: str
    stage: Stage
    detail: str


class ScanResult(BaseModel):
    """Complete record of one orchestrator run across all languages."""

    scan_id: str
    workspace: str
    repository: str
    revision: str
    status: ScanStatus = ScanStatus.PENDING
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    duration_ms: int | None = None
    languages: list[str] = Field(default_factory=list)
    languages_completed: list[str] = Field(default_factory=list)
    failures: list[LanguageFailure] = Field(default_factory=list)
    findings: list[Finding] = Field(default_factory=list)
    error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_severity(self) -> Severity:
        if not self.findings:
            return Severity.INFO
        return max(self.findings, key=lambda f: SEVERITY_WEIGHTS[f.severity]).severity

    @computed_field  # type: ignore[prop-decorator]
    @property
    def finding_count_by_severity(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for f in self.findings:
            counts[f.severity] = counts.get(f.severity, 0) + 1
        return counts
