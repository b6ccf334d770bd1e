# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Canonical language table with case-insensitive aliases."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from qlscan.core.constants import DEFAULT_LANGUAGE_ALIASES


class LanguageRegistry:
    """Insertion-ordered mapping of canonical language -> accepted aliases.

    Entries and aliases are only ever added. Each orchestrator owns its own
    registry so that resolution stays deterministic between instances.
    """

    def __init__(self, table: Mapping[str, Iterable[str]] | None = None) -> None:
        self._aliases: dict[str, list[str]] = {}
        source = DEFAULT_LANGUAGE_ALIASES if table is None else table
        for name, aliases in source.items():
            self.add(name, aliases)

    def add(self, name: str, aliases: Iterable[str] = ()) -> bool:
        """Register *name* and merge *aliases* into it.

        Returns True if *name* was not known before.
        """
        key = name.lower()
        created = key not in self._aliases
        known = self._aliases.setdefault(key, [])
        for alias in aliases:
            alias = alias.lower()
            if alias not in known:
                known.append(alias)
        return created

    def languages(self) -> list[str]:
        return list(self._aliases)

    def aliases(self, name: str) -> list[str]:
        return list(self._aliases.get(name.lower(), []))

    def items(self) -> Iterator[tuple[str, list[str]]]:
        for name, aliases in self._aliases.items():
            yield name, list(aliases)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)
