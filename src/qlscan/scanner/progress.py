# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Progress reporting and cooperative cancellation primitives."""

from __future__ import annotations

import logging
from typing import Protocol

from qlscan.core.exceptions import ScanCancelledError

logger = logging.getLogger("qlscan.scanner.progress")


class ProgressSink(Protocol):
    """Receives coarse progress updates from a running scan.

    *percent* is the overall completion (0-100) reached at this point.
    """

    def report(self, percent: float | None = None, message: str | None = None) -> None: ...


class NullProgress:
    """Progress sink that only logs."""

    def report(self, percent: float | None = None, message: str | None = None) -> None:
        if message:
            logger.debug("progress %s%%: %s", percent, message)


class CancellationToken:
    """Set once by the caller, polled by the orchestrator between languages."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, language: str | None = None) -> None:
        if self._cancelled:
            raise ScanCancelledError(language)
