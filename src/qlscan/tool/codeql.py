# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Thin async wrapper around the CodeQL command-line tool."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

from qlscan.core.config import Settings
from qlscan.core.constants import CODE_SCANNING_SUITES, DEFAULT_QUERY_NAMESPACE, Stage
from qlscan.core.exceptions import StageFailedError, ToolUnavailableError
from qlscan.tool.runner import CommandResult, run_command

logger = logging.getLogger("qlscan.tool.codeql")


def _version_tuple(version: str) -> tuple[int, ...]:
    parts: list[int] = []
    for piece in version.split("."):
        digits = "".join(ch for ch in piece if ch.isdigit())
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)


class CodeQLCli:
    """Locate and drive the ``codeql`` executable.

    Every method that spawns a process goes through :func:`run_command`, so
    the timeout configured for that kind of call always applies.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._path: str | None = None
        self._version: str | None = None

    @property
    def path(self) -> str:
        return self._path or self._settings.codeql_path

    @property
    def cached_version(self) -> str | None:
        return self._version

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def _candidate_paths(self) -> list[str]:
        """Return executables to try, in preference order.

        0) the configured ``codeql_path``
        1) ``codeql`` found on PATH
        2) a CLI unpacked under ``<home_dir>/cli``
        """
        candidates = [self._settings.codeql_path]
        if not self._settings.auto_detect_cli:
            return candidates

        on_path = shutil.which("codeql")
        if on_path:
            candidates.append(on_path)

        cli_root = self._settings.home_dir / "cli"
        if cli_root.is_dir():
            for name in ("codeql", "codeql.exe"):
                candidates.extend(str(p) for p in sorted(cli_root.rglob(name)) if p.is_file())

        unique: list[str] = []
        for c in candidates:
            if c and c not in unique:
                unique.append(c)
        return unique

    async def version(self, path: str | None = None) -> str:
        """Return the version reported by the CLI at *path*."""
        exe = path or self.path
        result = await run_command(
            [exe, "version", "-v", "--log-to-stderr", "--format=json"],
            timeout_s=self._settings.version_timeout,
        )
        if not result.ok:
            raise ToolUnavailableError(
                f"Failed to get CodeQL version from '{exe}': {result.describe()}"
            )
        try:
            info = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ToolUnavailableError(
                f"Unexpected version output from '{exe}': {exc}"
            ) from exc
        return str(info.get("version") or "unknown")

    def _is_compatible(self, version: str) -> bool:
        minimum = self._settings.min_cli_version
        return not minimum or _version_tuple(version) >= _version_tuple(minimum)

    async def locate(self) -> str:
        """Find a working CLI and remember it.

        Raises:
            ToolUnavailableError: when no candidate answers ``version``.
        """
        attempted: list[str] = []
        too_old: list[str] = []
        for candidate in self._candidate_paths():
            attempted.append(candidate)
            try:
                version = await self.version(candidate)
            except ToolUnavailableError as exc:
                logger.debug("CodeQL CLI not usable at '%s': %s", candidate, exc)
                continue
            if not self._is_compatible(version):
                logger.warning(
                    "Skipping CodeQL CLI at '%s': version %s, need >= %s",
                    candidate,
                    version,
                    self._settings.min_cli_version,
                )
                too_old.append(f"{candidate} ({version})")
                continue
            self._path = candidate
            self._version = version
            logger.info("CodeQL CLI version: %s (path: %s)", version, candidate)
            return candidate

        if too_old:
            raise ToolUnavailableError(
                f"No CodeQL CLI >= {self._settings.min_cli_version} found. "
                "Too old: " + ", ".join(too_old)
            )
        raise ToolUnavailableError(
            "CodeQL CLI not found. Attempted paths: "
            + ", ".join(attempted)
            + ". Install the CodeQL CLI or set QLSCAN_CODEQL_PATH."
        )

    async def resolve_languages(self) -> list[str]:
        """Return the extractor names the CLI supports."""
        command = [self.path, "resolve", "languages", "--format=betterjson"]
        logger.info("Running command to get supported languages: %s", " ".join(command))
        result = await run_command(command, timeout_s=self._settings.discovery_timeout)
        if not result.ok:
            raise ToolUnavailableError(
                f"Failed to get supported languages: {result.describe()}"
            )
        try:
            info = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ToolUnavailableError(f"Failed to get supported languages: {exc}") from exc

        extractors = info.get("extractors") if isinstance(info, dict) else None
        extractors = extractors or {}
        logger.info("Found %d language extractors", len(extractors))
        return [str(name).lower() for name in extractors]

    # ------------------------------------------------------------------
    # Query packs
    # ------------------------------------------------------------------

    def find_query_pack(self, language: str, suite: str = "default") -> str | None:
        """Return the query reference for *language*, or None if no packs exist.

        Installed packs are looked up as ``<packages>/<namespace>/<language>-queries``.
        When the packages directory exists but holds no matching pack, the
        default ``codeql/<language>-queries`` is returned.
        """
        packages = self._settings.packages_dir
        if not packages.is_dir():
            logger.warning("Query pack directory does not exist: %s", packages)
            return None

        pack_name = f"{language}-queries"
        query = f"{DEFAULT_QUERY_NAMESPACE}/{pack_name}"
        for namespace in sorted(p for p in packages.iterdir() if p.is_dir()):
            if (namespace / pack_name).is_dir():
                query = f"{namespace.name}/{pack_name}"
                break

        if suite in CODE_SCANNING_SUITES:
            query += f":codeql-suites/{language}-code-scanning.qls"
        return query

    async def download_pack(self, name: str) -> CommandResult:
        command = [self.path, "pack", "download", name]
        logger.info("Installing pack: %s", name)
        result = await run_command(command, timeout_s=self._settings.pack_download_timeout)
        if result.stderr.strip():
            logger.warning("Pack installation warnings: %s", result.stderr.strip())
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def create_database(
        self,
        language: str,
        source_root: Path,
        database_path: Path,
        *,
        build_mode_none: bool = False,
    ) -> Path:
        """Build (or overwrite) the analysis database for one language."""
        command = [
            self.path,
            "database",
            "create",
            "--overwrite",
            "-j",
            str(self._settings.threads),
            "--language",
            language,
            "-s",
            str(source_root),
        ]
        if build_mode_none:
            command.append("--build-mode=none")
        command.append(str(database_path))

        logger.info("CodeQL Create Command: %s", " ".join(command))
        database_path.parent.mkdir(parents=True, exist_ok=True)
        result = await run_command(command, cwd=source_root, timeout_s=self._settings.build_timeout)
        self._check_stage(result, language, Stage.DATABASE_CREATE)
        return database_path

    async def analyze_database(
        self,
        language: str,
        database_path: Path,
        query: str,
        output_path: Path,
    ) -> Path:
        """Run *query* against *database_path* and write SARIF to *output_path*."""
        if not database_path.exists():
            raise StageFailedError(
                language, Stage.DATABASE_ANALYZE, f"database not found at {database_path}"
            )

        command = [
            self.path,
            "database",
            "analyze",
            "-j",
            str(self._settings.threads),
            "--output",
            str(output_path),
            "--format",
            "sarif-latest",
        ]
        threat_model = self._settings.threat_model.lower()
        if threat_model and threat_model != "remote":
            command.extend(["--threat-model", threat_model])
        command.extend([str(database_path), query])

        logger.info("CodeQL Analyze Command: %s", " ".join(command))
        output_path.parent.mkdir(parents=True, exist_ok=True)
        result = await run_command(command, timeout_s=self._settings.analyze_timeout)
        self._check_stage(result, language, Stage.DATABASE_ANALYZE)

        if not output_path.is_file():
            raise StageFailedError(
                language, Stage.DATABASE_ANALYZE, f"no results written to {output_path}"
            )
        return output_path

    @staticmethod
    def _check_stage(result: CommandResult, language: str, stage: Stage) -> None:
        if not result.ok:
            raise StageFailedError(language, stage, result.describe())
        logger.debug("%s completed for %s: %s", stage, language, result.stdout.strip())
        if result.stderr.strip():
            logger.warning("%s warnings for %s: %s", stage, language, result.stderr.strip())
