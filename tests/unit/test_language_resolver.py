# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the language registry and resolver."""

from __future__ import annotations

import pytest

from qlscan.core.exceptions import ToolUnavailableError
from qlscan.languages import LanguageRegistry, LanguageResolver

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestLanguageRegistry:
    def test_default_table_order(self):
        registry = LanguageRegistry()
        assert registry.languages() == [
            "javascript", "python", "java", "csharp", "cpp",
            "go", "ruby", "swift", "kotlin", "scala",
        ]

    def test_aliases(self):
        registry = LanguageRegistry()
        assert registry.aliases("cpp") == ["cpp", "c++", "c", "cc", "cxx"]
        assert registry.aliases("JavaScript")[:2] == ["javascript", "typescript"]
        assert registry.aliases("cobol") == []

    def test_contains_is_case_insensitive(self):
        registry = LanguageRegistry()
        assert "Python" in registry
        assert "py" not in registry  # aliases are not canonical names
        assert 42 not in registry

    def test_add_new_language(self):
        registry = LanguageRegistry()
        assert registry.add("Rust") is True
        assert registry.languages()[-1] == "rust"
        assert registry.aliases("rust") == []

    def test_add_existing_merges_aliases(self):
        registry = LanguageRegistry()
        assert registry.add("python", ["py3", "PY"]) is False
        assert registry.aliases("python") == ["python", "py", "py3"]
        assert len(registry) == 10

    def test_custom_table(self):
        registry = LanguageRegistry({"go": ["go"]})
        assert registry.languages() == ["go"]

    def test_instances_are_independent(self):
        first = LanguageRegistry()
        second = LanguageRegistry()
        first.add("rust")
        assert "rust" not in second


# ---------------------------------------------------------------------------
# resolve()
# ---------------------------------------------------------------------------


class TestResolve:
    @pytest.fixture
    def resolver(self) -> LanguageResolver:
        return LanguageResolver()

    def test_aliases_collapse_to_one_language(self, resolver):
        assert resolver.resolve(["TypeScript", "JavaScript", "Python"]) == ["javascript", "python"]

    def test_cpp_family(self, resolver):
        assert resolver.resolve(["C", "C++", "Go"]) == ["cpp", "go"]

    def test_unknown_names_dropped(self, resolver):
        assert resolver.resolve(["HTML", "CSS", "Shell"]) == []

    def test_empty_input(self, resolver):
        assert resolver.resolve([]) == []

    def test_blank_entries_ignored(self, resolver):
        assert resolver.resolve(["", "  ", "rb"]) == ["ruby"]

    def test_first_seen_order_is_kept(self, resolver):
        assert resolver.resolve(["kt", "java", "ts", "kotlin"]) == ["kotlin", "java", "javascript"]

    def test_idempotent(self, resolver):
        once = resolver.resolve(["TSX", "golang", "C#", "py", "Swift"])
        assert resolver.resolve(once) == once
        assert once == ["javascript", "go", "csharp", "python", "swift"]

    def test_exact_match_beats_alias(self):
        # "c" is an alias of cpp, but a canonical "c" language wins once registered
        registry = LanguageRegistry()
        registry.add("c")
        assert LanguageResolver(registry).resolve(["C"]) == ["c"]

    def test_alias_match_uses_registry_order(self):
        registry = LanguageRegistry({"first": ["shared"], "second": ["shared"]})
        assert LanguageResolver(registry).resolve(["shared"]) == ["first"]


# ---------------------------------------------------------------------------
# discover_supported()
# ---------------------------------------------------------------------------


class _Source:
    def __init__(self, names=None, error=None):
        self.names = names or []
        self.error = error

    async def resolve_languages(self):
        if self.error is not None:
            raise self.error
        return self.names


class TestDiscoverSupported:
    async def test_adds_new_extractors(self):
        resolver = LanguageResolver()
        added = await resolver.discover_supported(_Source(["javascript", "Rust", "actions"]))
        assert added == ["rust", "actions"]
        assert resolver.resolve(["rust"]) == ["rust"]
        assert "actions" in resolver.registry

    async def test_nothing_new(self):
        resolver = LanguageResolver()
        assert await resolver.discover_supported(_Source(["python", "go"])) == []
        assert len(resolver.registry) == 10

    async def test_tool_error_propagates(self):
        resolver = LanguageResolver()
        with pytest.raises(ToolUnavailableError):
            await resolver.discover_supported(_Source(error=ToolUnavailableError("gone")))

    async def test_other_errors_are_wrapped(self):
        resolver = LanguageResolver()
        with pytest.raises(ToolUnavailableError, match="Failed to get supported languages"):
            await resolver.discover_supported(_Source(error=ValueError("bad json")))
