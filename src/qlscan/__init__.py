# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""qlscan - CodeQL scan orchestration and findings normalization."""

__version__ = "0.1.0"

from qlscan.languages import LanguageRegistry, LanguageResolver
from qlscan.models import Finding, FlowStep, Location
from qlscan.results import PersistedResultsLoader, parse_sarif
from qlscan.scanner.pipeline import ScanOrchestrator
from qlscan.sdk import load_results, load_results_sync, scan_workspace, scan_workspace_sync

__all__ = [
    "Finding",
    "FlowStep",
    "LanguageRegistry",
    "LanguageResolver",
    "Location",
    "PersistedResultsLoader",
    "ScanOrchestrator",
    "__version__",
    "load_results",
    "load_results_sync",
    "parse_sarif",
    "scan_workspace",
    "scan_workspace_sync",
]
