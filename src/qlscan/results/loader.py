# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Reload previously written SARIF documents without running CodeQL."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from qlscan.core.config import Settings, get_settings
from qlscan.core.constants import SARIF_SUFFIX, UNKNOWN_REVISION
from qlscan.languages.registry import LanguageRegistry
from qlscan.languages.resolver import LanguageResolver
from qlscan.models.finding import Finding
from qlscan.results.manifest import load_manifest
from qlscan.results.parser import load_sarif_file
from qlscan.scanner.events import ResultsCallback, ResultsChannel
from qlscan.scanner.state import WorkspaceState
from qlscan.tool.git import RepositoryIdentity, current_revision, repository_identity

logger = logging.getLogger("qlscan.results.loader")


def language_from_filename(filename: str) -> str | None:
    """Infer the language from ``owner-repo-language-revision.sarif``.

    The language is the second-to-last hyphen-separated segment.
    """
    stem = filename.removesuffix(SARIF_SUFFIX)
    parts = stem.split("-")
    if len(parts) >= 3 and parts[-2]:
        return parts[-2]
    return None


class PersistedResultsLoader:
    """Find and parse result documents from earlier scans.

    Discovery order:

    1. the results manifest, when it lists documents for this repository
    2. ``owner-repo-language-revision.sarif`` for each configured language,
       or any revision of those languages when the revision is unknown
    3. every ``*.sarif`` in the directory when no owner is known
    """

    def __init__(
        self,
        settings: Settings | None = None,
        registry: LanguageRegistry | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._resolver = LanguageResolver(registry)
        self._results = ResultsChannel()

    def set_results_callback(self, callback: ResultsCallback | None) -> None:
        self._results.set_callback(callback)

    def add_results_listener(self, callback: ResultsCallback) -> Callable[[], None]:
        return self._results.subscribe(callback)

    async def load_existing(self) -> list[Finding]:
        results_dir = self._settings.results_dir
        logger.info("Results directory: %s", results_dir)
        if not results_dir.is_dir():
            logger.info("Results directory does not exist: %s", results_dir)
            return []

        workspace = self._settings.workspace.resolve()
        identity = await repository_identity(
            workspace, self._settings.repo_owner, self._settings.repo_name
        )
        languages = self._configured_languages(identity)
        revision = await current_revision(workspace)

        documents = self._from_manifest(results_dir, identity, languages, revision)
        if documents is None:
            if identity.owner:
                documents = self._from_identity(results_dir, identity, languages, revision)
            else:
                logger.warning(
                    "Repository owner/name not configured, checking for any SARIF files"
                )
                documents = self._from_directory(results_dir)

        findings: list[Finding] = []
        for path, language in documents:
            logger.info("Loading SARIF file: %s (language: %s)", path.name, language)
            loaded = load_sarif_file(path, workspace, language)
            findings.extend(loaded)
            if loaded:
                self._results.publish(findings)

        logger.info("Loaded %d findings from %d files", len(findings), len(documents))
        return findings

    def _configured_languages(self, identity: RepositoryIdentity) -> list[str]:
        configured = self._settings.languages or WorkspaceState(
            self._settings.state_dir, identity.name
        ).languages()
        return self._resolver.resolve(configured)

    def _from_manifest(
        self,
        results_dir: Path,
        identity: RepositoryIdentity,
        languages: list[str],
        revision: str,
    ) -> list[tuple[Path, str]] | None:
        manifest = load_manifest(results_dir)
        if manifest is None or not manifest.for_repository(identity.owner, identity.name):
            return None

        wanted = revision if revision != UNKNOWN_REVISION else None
        entries = manifest.latest(identity.owner, identity.name, languages or None, wanted)
        documents = [
            (results_dir / entry.path, entry.language)
            for entry in entries
            if (results_dir / entry.path).is_file()
        ]
        logger.info("Results manifest lists %d documents for %s", len(documents), identity.prefix)
        return documents

    def _from_identity(
        self,
        results_dir: Path,
        identity: RepositoryIdentity,
        languages: list[str],
        revision: str,
    ) -> list[tuple[Path, str]]:
        if not languages:
            logger.warning("No languages configured, cannot look for specific SARIF files")
            return []

        documents: list[tuple[Path, str]] = []
        if revision == UNKNOWN_REVISION:
            logger.warning("Could not get current Git SHA, trying to load any matching files")
            for path in sorted(results_dir.glob(f"{identity.prefix}-*{SARIF_SUFFIX}")):
                language = language_from_filename(path.name)
                if language and language in languages:
                    documents.append((path, language))
            return documents

        for language in languages:
            path = results_dir / f"{identity.prefix}-{language}-{revision}{SARIF_SUFFIX}"
            if path.is_file():
                logger.info("Found SARIF file: %s", path.name)
                documents.append((path, language))
            else:
                logger.debug("SARIF file not found: %s", path.name)
        return documents

    def _from_directory(self, results_dir: Path) -> list[tuple[Path, str]]:
        sarif_files = sorted(results_dir.glob(f"*{SARIF_SUFFIX}"))
        logger.info("Found %d SARIF files in %s", len(sarif_files), results_dir)

        documents: list[tuple[Path, str]] = []
        for path in sarif_files:
            language = language_from_filename(path.name)
            if language:
                documents.append((path, language))
            else:
                logger.warning("Could not extract language from filename: %s", path.name)
        return documents
