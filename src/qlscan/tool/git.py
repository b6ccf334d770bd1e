# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Source revision and repository identity from the local git checkout."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from qlscan.core.constants import UNKNOWN_REVISION
from qlscan.tool.runner import run_command

logger = logging.getLogger("qlscan.tool.git")

# https://host/owner/repo(.git), ssh://git@host/owner/repo, git@host:owner/repo.git
_REMOTE_RE = re.compile(r"[:/](?P<owner>[^/:]+)/(?P<name>[^/]+?)(?:\.git)?/?$")


@dataclass(frozen=True)
class RepositoryIdentity:
    owner: str
    name: str

    @property
    def prefix(self) -> str:
        """Filename prefix for result documents of this repository."""
        return f"{self.owner}-{self.name}" if self.owner else self.name


def parse_remote_url(url: str) -> tuple[str, str] | None:
    match = _REMOTE_RE.search(url.strip())
    if not match:
        return None
    return match.group("owner"), match.group("name")


async def current_revision(workspace: Path) -> str:
    """Short (8 character) HEAD revision, or ``"unknown"`` outside a git checkout."""
    result = await run_command(["git", "rev-parse", "HEAD"], cwd=workspace, timeout_s=15)
    sha = result.stdout.strip()
    if not result.ok or not sha:
        logger.debug("Could not determine git revision in %s: %s", workspace, result.describe())
        return UNKNOWN_REVISION
    return sha[:8]


async def repository_identity(
    workspace: Path,
    owner: str = "",
    name: str = "",
) -> RepositoryIdentity:
    """Resolve the repository owner and name.

    Explicit values win. Missing parts are read from the ``origin`` remote,
    and the name finally falls back to the workspace directory name.
    """
    if owner and name:
        return RepositoryIdentity(owner=owner, name=name)

    result = await run_command(["git", "remote", "get-url", "origin"], cwd=workspace, timeout_s=15)
    parsed = parse_remote_url(result.stdout) if result.ok else None
    if parsed:
        owner = owner or parsed[0]
        name = name or parsed[1]

    return RepositoryIdentity(owner=owner, name=name or workspace.resolve().name)
