# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Map free-text language names onto the CodeQL language set."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from qlscan.core.exceptions import ToolUnavailableError
from qlscan.languages.registry import LanguageRegistry

logger = logging.getLogger("qlscan.languages.resolver")


class LanguageSource(Protocol):
    async def resolve_languages(self) -> list[str]: ...


class LanguageResolver:
    """Resolve repository language names to canonical CodeQL languages."""

    def __init__(self, registry: LanguageRegistry | None = None) -> None:
        self.registry = registry if registry is not None else LanguageRegistry()

    def resolve(self, names: Iterable[str]) -> list[str]:
        """Return the ordered, de-duplicated canonical languages for *names*.

        An exact canonical match wins over an alias match. Names that match
        nothing are dropped.
        """
        resolved: list[str] = []
        seen: set[str] = set()

        for name in names:
            lang = name.strip().lower()
            if not lang:
                continue

            if lang in self.registry:
                if lang not in seen:
                    resolved.append(lang)
                    seen.add(lang)
                continue

            for canonical, aliases in self.registry.items():
                if lang in aliases:
                    if canonical not in seen:
                        resolved.append(canonical)
                        seen.add(canonical)
                    break

        return resolved

    async def discover_supported(self, source: LanguageSource) -> list[str]:
        """Add every language the tool reports to the registry.

        Returns the names that were newly added.
        """
        try:
            reported = await source.resolve_languages()
        except ToolUnavailableError:
            raise
        except Exception as exc:
            raise ToolUnavailableError(f"Failed to get supported languages: {exc}") from exc

        added = [name.lower() for name in reported if self.registry.add(name)]
        logger.info("Supported languages: %s", ", ".join(self.registry.languages()))
        if added:
            logger.debug("Discovered languages outside the built-in table: %s", added)
        return added
