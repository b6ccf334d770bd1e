# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import asyncio
import contextlib
import signal
import sys
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from qlscan.core.config import Settings, get_settings
from qlscan.core.constants import FailurePolicy
from qlscan.core.exceptions import QlscanError, ScanCancelledError
from qlscan.core.logging import setup_logging

app = typer.Typer(
    name="qlscan",
    help="Run CodeQL over a workspace and normalize its findings",
    no_args_is_help=True,
)

err_console = Console(stderr=True)


class OutputFormat(StrEnum):
    CONSOLE = "console"
    JSON = "json"
    SARIF = "sarif"


class RichProgress:
    """Forward orchestrator progress to a rich progress bar."""

    def __init__(self, progress: Progress) -> None:
        self._progress = progress
        self._task = progress.add_task("Starting scan...", total=100)

    def report(self, percent: float | None = None, message: str | None = None) -> None:
        if percent is not None:
            self._progress.update(self._task, completed=percent)
        if message:
            self._progress.update(self._task, description=message)


def _load_settings(**options: object) -> Settings:
    """Settings from env/.env, overridden only by options given on the command line."""
    overrides = {k: v for k, v in options.items() if v is not None}
    return get_settings(**overrides)


@app.callback()
def main(
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Logging level (default from QLSCAN_LOG_LEVEL)")
    ] = None,
) -> None:
    settings = get_settings()
    setup_logging(log_level or settings.log_level, settings.log_format)


@app.command()
def scan(
    workspace: Annotated[
        Path | None, typer.Argument(help="Source tree to scan (default: current directory)")
    ] = None,
    language: Annotated[
        list[str] | None,
        typer.Option("--language", "-l", help="Language to scan; repeat for several"),
    ] = None,
    suite: Annotated[
        str | None, typer.Option("--suite", help="Query suite (e.g. security-extended)")
    ] = None,
    threat_model: Annotated[
        str | None, typer.Option("--threat-model", help="Analysis threat model")
    ] = None,
    failure_policy: Annotated[
        FailurePolicy | None,
        typer.Option("--failure-policy", help="abort the scan or skip the failing language"),
    ] = None,
    fmt: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.CONSOLE,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file path"),
    ] = None,
) -> None:
    """Build and analyze a CodeQL database for every active language."""
    settings = _load_settings(
        workspace=workspace,
        languages=language or None,
        suites=[suite] if suite else None,
        threat_model=threat_model,
        failure_policy=failure_policy,
    )
    exit_code = asyncio.run(_async_scan(settings, fmt, output))
    if exit_code:
        raise typer.Exit(exit_code)


async def _async_scan(settings: Settings, fmt: OutputFormat, output: Path | None) -> int:
    from qlscan.scanner.pipeline import ScanOrchestrator
    from qlscan.scanner.progress import CancellationToken

    orchestrator = ScanOrchestrator(settings=settings)
    token = CancellationToken()

    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, token.cancel)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=err_console,
            transient=True,
        ) as progress:
            await orchestrator.run_scan(progress=RichProgress(progress), cancel=token)
    except ScanCancelledError as exc:
        err_console.print(f"[yellow]{exc}[/yellow]")
        return 130
    except QlscanError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        return 1
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)

    result = orchestrator.last_result
    if result is None:
        return 1

    if fmt == OutputFormat.CONSOLE:
        from qlscan.cli.formatters.console import format_scan_result
        format_scan_result(result)
    elif fmt == OutputFormat.JSON:
        from qlscan.cli.formatters.json_fmt import format_json
        _write_output(format_json(result), output)
    elif fmt == OutputFormat.SARIF:
        from qlscan.cli.formatters.sarif import format_sarif
        _write_output(format_sarif(result.findings, root=result.workspace), output)
    return 0


@app.command()
def load(
    workspace: Annotated[
        Path | None, typer.Argument(help="Workspace whose stored results to load")
    ] = None,
    language: Annotated[
        list[str] | None,
        typer.Option("--language", "-l", help="Only load these languages"),
    ] = None,
    fmt: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.CONSOLE,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file path"),
    ] = None,
) -> None:
    """Load findings written by earlier scans without running CodeQL."""
    from qlscan.results.loader import PersistedResultsLoader

    settings = _load_settings(workspace=workspace, languages=language or None)
    loader = PersistedResultsLoader(settings=settings)
    try:
        findings = asyncio.run(loader.load_existing())
    except QlscanError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc

    root = str(settings.workspace.resolve())
    if fmt == OutputFormat.CONSOLE:
        from qlscan.cli.formatters.console import format_findings
        format_findings(findings, root=root)
    elif fmt == OutputFormat.JSON:
        from qlscan.cli.formatters.json_fmt import format_findings_json
        _write_output(format_findings_json(findings), output)
    elif fmt == OutputFormat.SARIF:
        from qlscan.cli.formatters.sarif import format_sarif
        _write_output(format_sarif(findings, root=root), output)


@app.command()
def languages(
    terms: Annotated[
        list[str] | None, typer.Argument(help="Language names or aliases to resolve")
    ] = None,
    discover: Annotated[
        bool, typer.Option("--discover", help="Add the languages the CodeQL CLI reports")
    ] = False,
) -> None:
    """Show the language table, or resolve names against it."""
    from qlscan.languages.resolver import LanguageResolver

    resolver = LanguageResolver()
    if discover:
        from qlscan.tool.codeql import CodeQLCli

        try:
            asyncio.run(_discover(resolver, CodeQLCli(get_settings())))
        except QlscanError as exc:
            err_console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(1) from exc

    if terms:
        for name in resolver.resolve(terms):
            typer.echo(name)
        return

    table = Table(title="CodeQL languages")
    table.add_column("Language", style="bold")
    table.add_column("Aliases")
    for name, aliases in resolver.registry.items():
        table.add_row(name, ", ".join(aliases))
    Console().print(table)


async def _discover(resolver, cli) -> None:
    await cli.locate()
    await resolver.discover_supported(cli)


@app.command()
def version(
    cli: Annotated[
        bool, typer.Option("--cli/--no-cli", help="Also report the CodeQL CLI version")
    ] = True,
) -> None:
    """Show version information."""
    from qlscan import __version__

    typer.echo(f"qlscan v{__version__}")
    if not cli:
        return

    from qlscan.core.exceptions import ToolUnavailableError
    from qlscan.tool.codeql import CodeQLCli

    codeql = CodeQLCli(get_settings())
    try:
        path = asyncio.run(codeql.locate())
    except ToolUnavailableError as exc:
        typer.echo(f"codeql: not available ({exc})")
        return
    typer.echo(f"codeql v{codeql.cached_version} ({path})")


def _write_output(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text)
        typer.echo(f"Output written to {output}")
    else:
        sys.stdout.write(text + "\n")
