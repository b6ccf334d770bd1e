# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rich console output formatter for findings."""

from __future__ import annotations

import os

from rich.console import Console
from rich.text import Text

from qlscan import __version__
from qlscan.core.constants import SEVERITY_WEIGHTS, Severity
from qlscan.models.finding import Finding
from qlscan.models.scan import ScanResult

console = Console()

SEVERITY_COLORS = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
    Severity.INFO: "dim",
}


def _display_path(path: str, root: str | None) -> str:
    if root:
        try:
            return os.path.relpath(path, root)
        except ValueError:
            return path
    return path


def format_findings(
    findings: list[Finding],
    *,
    root: str | None = None,
    out: Console | None = None,
) -> None:
    """Print findings ordered by severity, with their data-flow paths."""
    out = out or console
    if not findings:
        out.print("  No findings.", style="bold green")
        out.print()
        return

    for finding in sorted(findings, key=lambda f: -SEVERITY_WEIGHTS[f.severity]):
        sev_color = SEVERITY_COLORS.get(finding.severity, "white")
        out.print(Text(finding.severity.upper().ljust(9), style=sev_color), end="")
        out.print(f"  [bold]{finding.rule_id}[/bold]  [dim]({finding.language})[/dim]")

        loc = finding.location
        out.print(
            f"          {_display_path(loc.file, root)}:{loc.start_line}:{loc.start_column}",
            style="dim",
        )
        out.print(f"          {finding.message.splitlines()[0] if finding.message else ''}")

        if finding.flow_steps:
            last = len(finding.flow_steps) - 1
            for step in finding.flow_steps:
                label = "source" if step.step_index == 0 else "sink" if step.step_index == last else "step"
                where = f"{_display_path(step.file, root)}:{step.start_line}"
                note = f"  {step.message}" if step.message else ""
                out.print(f"            {step.step_index:>2} {label:<6} {where}{note}", style="dim")
        out.print()

    counts: dict[str, int] = {}
    for f in findings:
        counts[f.severity] = counts.get(f.severity, 0) + 1
    parts = [f"{counts[s]} {s}" for s in Severity if s in counts]
    out.print(f"  Summary: {len(findings)} findings ({', '.join(parts)})")
    out.print()


def format_scan_result(result: ScanResult, out: Console | None = None) -> None:
    """Print a full orchestrator run to the console."""
    out = out or console
    out.print()
    out.print(f"[bold]qlscan v{__version__}[/bold] - CodeQL scan")
    out.print(f"  Repository: {result.repository} @ {result.revision}")
    out.print(f"  Languages:  {', '.join(result.languages) or '-'}")
    out.print()

    format_findings(result.findings, root=result.workspace, out=out)

    if result.duration_ms is not None:
        out.print(f"  Duration: {result.duration_ms / 1000:.1f}s")
    for failure in result.failures:
        out.print(f"  Skipped {failure.language} ({failure.stage}): {failure.detail}", style="red")
    out.print()
