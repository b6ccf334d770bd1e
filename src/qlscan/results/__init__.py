# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SARIF parsing and persisted result discovery."""

from qlscan.results.loader import PersistedResultsLoader
from qlscan.results.parser import load_sarif_file, normalize_severity, parse_sarif

__all__ = [
    "PersistedResultsLoader",
    "load_sarif_file",
    "normalize_severity",
    "parse_sarif",
]
