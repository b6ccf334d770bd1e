# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Public SDK interface for embedding qlscan in other tools.

Usage::

    from qlscan import scan_workspace_sync

    findings = scan_workspace_sync("path/to/repo", languages=["ts", "py"])
    for finding in findings:
        print(finding.severity, finding.rule_id, finding.location.file)

    # Async, with incremental results
    findings = await scan_workspace("path/to/repo", on_results=print)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from qlscan.core.config import get_settings
from qlscan.models.finding import Finding
from qlscan.results.loader import PersistedResultsLoader
from qlscan.scanner.events import ResultsCallback
from qlscan.scanner.pipeline import ScanOrchestrator

logger = logging.getLogger("qlscan.sdk")


def _overrides(workspace: str | Path, languages: list[str] | None) -> dict[str, object]:
    overrides: dict[str, object] = {"workspace": Path(workspace)}
    if languages:
        overrides["languages"] = list(languages)
    return overrides


# ---------------------------------------------------------------------------
# Public async API
# ---------------------------------------------------------------------------


async def scan_workspace(
    workspace: str | Path,
    *,
    languages: list[str] | None = None,
    on_results: ResultsCallback | None = None,
) -> list[Finding]:
    """Run CodeQL over *workspace* and return every finding.

    Parameters
    ----------
    workspace:
        Source tree to scan.
    languages:
        Language names or aliases; defaults to the configured ones.
    on_results:
        Called with the accumulated findings after each language.
    """
    settings = get_settings(**_overrides(workspace, languages))
    orchestrator = ScanOrchestrator(settings=settings)
    if on_results is not None:
        orchestrator.set_results_callback(on_results)
    return await orchestrator.run_scan()


async def load_results(
    workspace: str | Path,
    *,
    languages: list[str] | None = None,
    on_results: ResultsCallback | None = None,
) -> list[Finding]:
    """Return the findings stored by earlier scans of *workspace*."""
    settings = get_settings(**_overrides(workspace, languages))
    loader = PersistedResultsLoader(settings=settings)
    if on_results is not None:
        loader.set_results_callback(on_results)
    return await loader.load_existing()


# ---------------------------------------------------------------------------
# Public sync wrappers
# ---------------------------------------------------------------------------


def scan_workspace_sync(
    workspace: str | Path,
    *,
    languages: list[str] | None = None,
    on_results: ResultsCallback | None = None,
) -> list[Finding]:
    """Synchronous wrapper around :func:`scan_workspace`.

    Calls ``asyncio.run()`` internally, so it must **not** be called from
    within an already-running event loop.
    """
    return asyncio.run(scan_workspace(workspace, languages=languages, on_results=on_results))


def load_results_sync(
    workspace: str | Path,
    *,
    languages: list[str] | None = None,
    on_results: ResultsCallback | None = None,
) -> list[Finding]:
    """Synchronous wrapper around :func:`load_results`."""
    return asyncio.run(load_results(workspace, languages=languages, on_results=on_results))
