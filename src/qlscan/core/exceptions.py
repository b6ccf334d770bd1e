# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for qlscan."""

from __future__ import annotations

from qlscan.core.constants import Stage


class QlscanError(Exception):
    """Base exception for all qlscan errors."""


class ConfigurationError(QlscanError):
    """Invalid or missing configuration."""


class ToolUnavailableError(QlscanError):
    """The CodeQL CLI is missing, unresponsive, or cannot list its languages."""


class StageFailedError(QlscanError):
    """A database build or analysis step failed for one language."""

    def __init__(self, language: str, stage: Stage, detail: str) -> None:
        self.language = language
        self.stage = stage
        self.detail = detail
        super().__init__(f"{stage} failed for {language}: {detail}")


class ScanCancelledError(QlscanError):
    """Cancellation was observed at a language boundary."""

    def __init__(self, language: str | None = None) -> None:
        self.language = language
        where = f" before {language}" if language else ""
        super().__init__(f"Scan cancelled{where}")


class ScanInProgressError(QlscanError):
    """A scan was requested while another one is still running."""
