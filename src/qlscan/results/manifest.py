# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Sidecar index of result documents written to the results directory.

The index records owner, repository, language and revision for every SARIF
document explicitly, so readers never have to take the file name apart.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from qlscan.core.constants import MANIFEST_FILENAME

logger = logging.getLogger("qlscan.results.manifest")


class ManifestEntry(BaseModel):
    owner: str = ""
    repo: str
    language: str
    revision: str
    path: str = Field(description="File name relative to the results directory")
    written_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ResultsManifest(BaseModel):
    version: int = 1
    entries: list[ManifestEntry] = Field(default_factory=list)

    def record(self, entry: ManifestEntry) -> None:
        """Add *entry*, replacing any entry for the same document."""
        self.entries = [
            e
            for e in self.entries
            if not (
                e.owner == entry.owner
                and e.repo == entry.repo
                and e.language == entry.language
                and e.revision == entry.revision
            )
        ]
        self.entries.append(entry)

    def for_repository(self, owner: str, repo: str) -> list[ManifestEntry]:
        return [e for e in self.entries if e.repo == repo and (not owner or e.owner == owner)]

    def latest(
        self,
        owner: str,
        repo: str,
        languages: list[str] | None = None,
        revision: str | None = None,
    ) -> list[ManifestEntry]:
        """Pick one entry per language.

        With a *revision*, only entries for that revision qualify. Without
        one, the most recently written entry wins. Languages come back in
        *languages* order when given, in first-recorded order otherwise.
        """
        by_language: dict[str, ManifestEntry] = {}
        for entry in self.for_repository(owner, repo):
            if languages is not None and entry.language not in languages:
                continue
            if revision and entry.revision != revision:
                continue
            current = by_language.get(entry.language)
            if current is None or entry.written_at >= current.written_at:
                by_language[entry.language] = entry

        if languages is None:
            return list(by_language.values())
        return [by_language[lang] for lang in languages if lang in by_language]


def manifest_path(results_dir: Path) -> Path:
    return results_dir / MANIFEST_FILENAME


def load_manifest(results_dir: Path) -> ResultsManifest | None:
    """Return the manifest, or None when there is none or it is unreadable."""
    path = manifest_path(results_dir)
    if not path.is_file():
        return None
    try:
        return ResultsManifest.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        logger.warning("Ignoring unreadable results manifest %s: %s", path, exc)
        return None


def record_result(
    results_dir: Path,
    *,
    owner: str,
    repo: str,
    language: str,
    revision: str,
    document: Path,
) -> ManifestEntry:
    """Add a freshly written document to the manifest and save it."""
    manifest = load_manifest(results_dir) or ResultsManifest()
    entry = ManifestEntry(
        owner=owner,
        repo=repo,
        language=language,
        revision=revision,
        path=document.name,
    )
    manifest.record(entry)
    results_dir.mkdir(parents=True, exist_ok=True)
    manifest_path(results_dir).write_text(manifest.model_dump_json(indent=2), encoding="utf-8")
    return entry
