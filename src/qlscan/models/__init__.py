# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Domain models for qlscan."""

from qlscan.models.finding import Finding, FlowStep, Location
from qlscan.models.scan import LanguageFailure, ScanResult

__all__ = [
    "Finding",
    "FlowStep",
    "LanguageFailure",
    "Location",
    "ScanResult",
]
