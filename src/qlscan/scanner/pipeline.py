# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan orchestrator: tool check -> languages -> build -> analyze -> parse."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from qlscan.core.config import Settings, get_settings
from qlscan.core.constants import DEFAULT_QUERY_NAMESPACE, FailurePolicy, ScanStatus, Stage
from qlscan.core.exceptions import (
    ConfigurationError,
    QlscanError,
    ScanCancelledError,
    ScanInProgressError,
    StageFailedError,
)
from qlscan.languages.registry import LanguageRegistry
from qlscan.languages.resolver import LanguageResolver
from qlscan.models.finding import Finding
from qlscan.models.scan import LanguageFailure, ScanResult
from qlscan.results.manifest import record_result
from qlscan.results.parser import parse_sarif
from qlscan.scanner.context import ScanContext
from qlscan.scanner.events import ResultsCallback, ResultsChannel
from qlscan.scanner.progress import CancellationToken, NullProgress, ProgressSink
from qlscan.scanner.state import WorkspaceState
from qlscan.tool.codeql import CodeQLCli
from qlscan.tool.git import RepositoryIdentity, current_revision, repository_identity

logger = logging.getLogger("qlscan.scanner.pipeline")

# Overall progress (percent) reserved for the per-language stages
_LANGUAGES_START = 20.0
_LANGUAGES_SPAN = 60.0


class ScanOrchestrator:
    """Drive CodeQL over every active language of one workspace.

    Languages run strictly one after another: each build and analysis is a
    heavy CodeQL process, and languages share the repository's database and
    results directories. After every language that produced findings, the
    registered listeners receive a snapshot of everything found so far.

    Only one scan may run per orchestrator at a time; a second call to
    :meth:`run_scan` while one is in flight raises :class:`ScanInProgressError`.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cli: CodeQLCli | None = None,
        registry: LanguageRegistry | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._cli = cli or CodeQLCli(self._settings)
        self.registry = registry if registry is not None else LanguageRegistry()
        self._resolver = LanguageResolver(self.registry)
        self._results = ResultsChannel()
        self._running = False
        self.last_result: ScanResult | None = None

    @property
    def resolver(self) -> LanguageResolver:
        return self._resolver

    @property
    def is_running(self) -> bool:
        return self._running

    def set_results_callback(self, callback: ResultsCallback | None) -> None:
        """Replace the incremental results consumer."""
        self._results.set_callback(callback)

    def add_results_listener(self, callback: ResultsCallback) -> Callable[[], None]:
        """Add a consumer next to the existing ones; returns an unsubscribe function."""
        return self._results.subscribe(callback)

    async def run_scan(
        self,
        progress: ProgressSink | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[Finding]:
        """Scan every active language and return all findings.

        Raises:
            ScanInProgressError: another scan is running on this orchestrator.
            ToolUnavailableError: the CodeQL CLI is missing or unresponsive.
            StageFailedError: a build or analysis failed (``abort`` policy).
            ScanCancelledError: cancellation was requested between languages.
        """
        if self._running:
            raise ScanInProgressError("A scan is already running")
        self._running = True
        try:
            return await self._run(progress or NullProgress(), cancel or CancellationToken())
        finally:
            self._running = False

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _run(self, progress: ProgressSink, cancel: CancellationToken) -> list[Finding]:
        settings = self._settings
        start_time = time.monotonic()

        progress.report(5, "Initializing local CodeQL scan...")
        await self._cli.locate()
        await self._resolver.discover_supported(self._cli)

        progress.report(10, "Setting up directories...")
        workspace = settings.workspace.resolve()
        if not workspace.is_dir():
            raise ConfigurationError(f"Workspace is not a directory: {workspace}")
        identity = await repository_identity(workspace, settings.repo_owner, settings.repo_name)
        revision = await current_revision(workspace)
        try:
            settings.databases_dir.mkdir(parents=True, exist_ok=True)
            settings.results_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(f"Cannot create CodeQL directories: {exc}") from exc

        progress.report(15, "Detecting languages...")
        languages = self._active_languages(identity)
        logger.info("Detected languages: [%s]", ", ".join(languages))

        context = ScanContext(
            scan_id=uuid.uuid4().hex[:12],
            workspace=workspace,
            repository=identity,
            revision=revision,
            databases_dir=settings.databases_dir,
            results_dir=settings.results_dir,
            languages=languages,
        )
        result = ScanResult(
            scan_id=context.scan_id,
            workspace=str(workspace),
            repository=identity.prefix,
            revision=revision,
            status=ScanStatus.RUNNING,
            languages=languages,
        )
        self.last_result = result

        try:
            for i, language in enumerate(languages):
                cancel.raise_if_cancelled(language)
                span = _LANGUAGES_SPAN / len(languages)
                base = _LANGUAGES_START + i * span

                try:
                    findings = await self._scan_language(context, language, progress, base, span)
                except StageFailedError as exc:
                    if settings.failure_policy != FailurePolicy.SKIP:
                        raise
                    logger.error("Skipping %s: %s", language, exc)
                    result.failures.append(
                        LanguageFailure(language=language, stage=exc.stage, detail=exc.detail)
                    )
                    continue

                context.add_findings(findings)
                result.languages_completed.append(language)
                logger.info("%s: %d findings", language, len(findings))
                if findings:
                    self._results.publish(context.snapshot())
        except ScanCancelledError as exc:
            self._finish(result, context, start_time, ScanStatus.CANCELLED, str(exc))
            logger.info("Scan %s cancelled", context.scan_id)
            raise
        except asyncio.CancelledError:
            self._finish(result, context, start_time, ScanStatus.CANCELLED, "task cancelled")
            logger.info("Scan %s task cancelled", context.scan_id)
            raise
        except QlscanError as exc:
            self._finish(result, context, start_time, ScanStatus.FAILED, str(exc))
            logger.error("Scan %s failed: %s", context.scan_id, exc)
            raise
        except Exception as exc:
            self._finish(result, context, start_time, ScanStatus.FAILED, str(exc))
            logger.exception("Scan %s failed unexpectedly", context.scan_id)
            raise

        progress.report(95, "Finalizing results...")
        self._finish(result, context, start_time, ScanStatus.COMPLETED)
        logger.info(
            "Scan %s complete: languages=%d findings=%d failures=%d duration=%dms",
            context.scan_id,
            len(result.languages_completed),
            len(result.findings),
            len(result.failures),
            result.duration_ms,
        )
        return context.snapshot()

    def _active_languages(self, identity: RepositoryIdentity) -> list[str]:
        """Configured languages win; otherwise resolve and remember the repository's."""
        state = WorkspaceState(self._settings.state_dir, identity.name)
        configured = self._settings.languages or state.languages()
        if configured:
            return self._resolver.resolve(configured)

        languages = self._resolver.resolve(self._settings.repo_languages)
        if languages:
            logger.info("Updating languages from repository metadata")
            state.save_languages(languages)
        else:
            logger.warning("No languages configured or reported for %s", identity.prefix)
        return languages

    async def _scan_language(
        self,
        context: ScanContext,
        language: str,
        progress: ProgressSink,
        base: float,
        span: float,
    ) -> list[Finding]:
        stage = Stage.DATABASE_CREATE
        try:
            progress.report(base, f"Creating {language} database...")
            database = await self._cli.create_database(
                language,
                context.workspace,
                context.database_path(language),
                build_mode_none=language in self._settings.build_none_languages,
            )

            stage = Stage.DATABASE_ANALYZE
            progress.report(base + span / 3, f"Analyzing {language} database...")
            query = await self._query_for(language)
            logger.info("Using query pack: %s for language: %s", query, language)
            output = await self._cli.analyze_database(
                language, database, query, context.results_path(language)
            )
            record_result(
                context.results_dir,
                owner=context.repository.owner,
                repo=context.repository.name,
                language=language,
                revision=context.revision,
                document=output,
            )
        except OSError as exc:
            raise StageFailedError(language, stage, str(exc)) from exc

        progress.report(base + 2 * span / 3, f"Processing {language} results...")
        return parse_sarif(self._read_document(language, output), context.workspace, language)

    async def _query_for(self, language: str) -> str:
        suite = self._settings.suites[0] if self._settings.suites else "default"
        logger.info("Using suite: %s for analysis", suite)

        query = self._cli.find_query_pack(language, suite)
        if query is None and self._settings.auto_download_packs:
            download = await self._cli.download_pack(f"{DEFAULT_QUERY_NAMESPACE}/{language}-queries")
            if download.ok:
                query = self._cli.find_query_pack(language, suite)
            else:
                logger.warning("Pack download failed for %s: %s", language, download.describe())

        if query is None:
            raise StageFailedError(
                language,
                Stage.DATABASE_ANALYZE,
                f"No query pack found for language: {language}. Please ensure the pack is installed.",
            )
        return query

    @staticmethod
    def _read_document(language: str, path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StageFailedError(
                language, Stage.DATABASE_ANALYZE, f"unreadable results at {path}: {exc}"
            ) from exc

    @staticmethod
    def _finish(
        result: ScanResult,
        context: ScanContext,
        start_time: float,
        status: ScanStatus,
        error: str | None = None,
    ) -> None:
        result.findings = context.snapshot()
        result.status = status
        result.error = error
        result.completed_at = datetime.now(UTC)
        result.duration_ms = int((time.monotonic() - start_time) * 1000)
