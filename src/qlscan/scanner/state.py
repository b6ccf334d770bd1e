# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Per-repository state persisted between runs."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger("qlscan.scanner.state")


class RepositoryState(BaseModel):
    languages: list[str] = Field(default_factory=list)
    updated_at: datetime | None = None


class WorkspaceState:
    """JSON file remembering the languages resolved for a repository."""

    def __init__(self, state_dir: Path, repository: str) -> None:
        self.path = state_dir / f"{repository}.json"

    def load(self) -> RepositoryState:
        if not self.path.is_file():
            return RepositoryState()
        try:
            return RepositoryState.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return RepositoryState()

    def languages(self) -> list[str]:
        return self.load().languages

    def save_languages(self, languages: list[str]) -> None:
        state = RepositoryState(languages=list(languages), updated_at=datetime.now(UTC))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Saved languages for future runs: %s", ", ".join(languages))
