# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path

import pytest

from qlscan.core.config import Settings
from qlscan.core.constants import Stage
from qlscan.core.exceptions import StageFailedError, ToolUnavailableError
from qlscan.tool.git import RepositoryIdentity
from qlscan.tool.runner import CommandResult

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "sarif"
TAINT_FLOW_SARIF = FIXTURES_DIR / "taint_flow.sarif"
MIXED_LEVELS_SARIF = FIXTURES_DIR / "mixed_levels.sarif"


@pytest.fixture
def sarif_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep QLSCAN_* variables and .env files of the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("QLSCAN_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    logging.getLogger("qlscan").handlers.clear()


@pytest.fixture
def workspace(tmp_path) -> Path:
    ws = tmp_path / "webapp"
    (ws / "src").mkdir(parents=True)
    (ws / "src" / "db.js").write_text("module.exports = {};\n")
    return ws


@pytest.fixture
def settings(tmp_path, workspace) -> Settings:
    return Settings(
        home_dir=tmp_path / "codeql-home",
        workspace=workspace,
        repo_owner="acme",
        repo_name="webapp",
        _env_file=None,
    )


@pytest.fixture
def fixed_git(monkeypatch):
    """Pin revision and identity lookups for the orchestrator and the loader."""

    def _pin(revision: str = "abc12345", owner: str = "acme", name: str = "webapp"):
        async def fake_revision(workspace):
            return revision

        async def fake_identity(workspace, owner_override="", name_override=""):
            return RepositoryIdentity(owner=owner_override or owner, name=name_override or name)

        for module in ("qlscan.scanner.pipeline", "qlscan.results.loader"):
            monkeypatch.setattr(f"{module}.current_revision", fake_revision)
            monkeypatch.setattr(f"{module}.repository_identity", fake_identity)

    _pin()
    return _pin


class FakeCodeQLCli:
    """In-memory stand-in for :class:`qlscan.tool.codeql.CodeQLCli`.

    ``documents`` maps a language to the SARIF file copied into place by
    ``analyze_database``. Languages listed in ``fail`` raise
    :class:`StageFailedError` at the given stage.
    """

    def __init__(
        self,
        documents: dict[str, Path] | None = None,
        *,
        extractors: list[str] | None = None,
        fail: dict[str, Stage] | None = None,
        available: bool = True,
    ) -> None:
        self.documents = documents or {}
        self.extractors = extractors if extractors is not None else ["javascript", "python"]
        self.fail = fail or {}
        self.available = available
        self.calls: list[tuple[str, str]] = []
        self.hooks: dict[str, object] = {}

    @property
    def path(self) -> str:
        return "codeql"

    async def locate(self) -> str:
        self.calls.append(("locate", ""))
        if not self.available:
            raise ToolUnavailableError("CodeQL CLI not found. Attempted paths: codeql")
        return "codeql"

    async def resolve_languages(self) -> list[str]:
        self.calls.append(("resolve_languages", ""))
        return list(self.extractors)

    def find_query_pack(self, language: str, suite: str = "default") -> str | None:
        return f"codeql/{language}-queries"

    async def download_pack(self, name: str) -> CommandResult:
        return CommandResult(["codeql", "pack", "download", name], None, 0, "", "")

    async def create_database(self, language, source_root, database_path, *, build_mode_none=False):
        self.calls.append(("create", language))
        if self.fail.get(language) == Stage.DATABASE_CREATE:
            raise StageFailedError(language, Stage.DATABASE_CREATE, "exit code 2: build failed")
        database_path.mkdir(parents=True, exist_ok=True)
        return database_path

    async def analyze_database(self, language, database_path, query, output_path):
        self.calls.append(("analyze", language))
        hook = self.hooks.get(language)
        if hook is not None:
            await hook()
        if self.fail.get(language) == Stage.DATABASE_ANALYZE:
            raise StageFailedError(language, Stage.DATABASE_ANALYZE, "exit code 2: analysis failed")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        source = self.documents.get(language)
        if source is not None:
            shutil.copyfile(source, output_path)
        else:
            output_path.write_text(json.dumps({"version": "2.1.0", "runs": []}))
        return output_path


@pytest.fixture
def fake_cli() -> FakeCodeQLCli:
    return FakeCodeQLCli(
        documents={"javascript": TAINT_FLOW_SARIF, "python": MIXED_LEVELS_SARIF},
    )


@pytest.fixture
def make_cli():
    """Factory for fake CLIs configured per test."""
    return FakeCodeQLCli
