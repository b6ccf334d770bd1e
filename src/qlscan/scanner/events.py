# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Incremental result delivery to registered listeners."""

from __future__ import annotations

import logging
from collections.abc import Callable

from qlscan.models.finding import Finding

logger = logging.getLogger("qlscan.scanner.events")

ResultsCallback = Callable[[list[Finding]], None]


class ResultsChannel:
    """Deliver snapshots of the accumulated findings.

    ``set_callback`` keeps the single-consumer contract: it replaces every
    registered listener. ``subscribe`` adds another listener alongside the
    existing ones and returns a function that removes it again.
    Listeners run synchronously, in registration order, on the caller's task.
    """

    def __init__(self) -> None:
        self._listeners: list[ResultsCallback] = []

    @property
    def listeners(self) -> list[ResultsCallback]:
        return list(self._listeners)

    def set_callback(self, callback: ResultsCallback | None) -> None:
        self._listeners = [callback] if callback is not None else []

    def subscribe(self, callback: ResultsCallback) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def publish(self, findings: list[Finding]) -> None:
        """Send each listener its own copy of *findings*."""
        for listener in list(self._listeners):
            try:
                listener(list(findings))
            except Exception:
                logger.exception("Results listener %r failed", listener)
