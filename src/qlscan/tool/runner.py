# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Async subprocess execution with a per-call timeout."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("qlscan.tool.runner")


@dataclass(frozen=True)
class CommandResult:
    command: list[str]
    cwd: str | None
    exit_code: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    def describe(self) -> str:
        """One-line summary suitable for an error message."""
        if self.timed_out:
            return f"timed out: {' '.join(self.command)}"
        detail = (self.stderr or self.stdout).strip().splitlines()
        tail = detail[-1] if detail else "no output"
        return f"exit code {self.exit_code}: {tail}"


async def _kill(proc: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    await proc.wait()


async def run_command(
    command: list[str],
    cwd: Path | None = None,
    timeout_s: float = 120,
) -> CommandResult:
    """Run *command* to completion and capture its output.

    A missing executable is reported as exit code 127. On timeout the process
    is killed and the result is returned with ``timed_out=True``.
    If the caller is cancelled the process is killed before the cancellation
    propagates.
    """
    cwd_str = str(cwd) if cwd is not None else None
    logger.debug("Running: %s (cwd=%s)", " ".join(command), cwd_str)

    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            cwd=cwd_str,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as exc:
        return CommandResult(
            command=command,
            cwd=cwd_str,
            exit_code=127,
            stdout="",
            stderr=str(exc),
        )

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except asyncio.CancelledError:
        logger.debug("Cancelled, killing: %s", " ".join(command))
        await _kill(proc)
        raise
    except TimeoutError:
        await _kill(proc)
        return CommandResult(
            command=command,
            cwd=cwd_str,
            exit_code=proc.returncode if proc.returncode is not None else -9,
            stdout="",
            stderr=f"timed out after {timeout_s:g}s",
            timed_out=True,
        )

    return CommandResult(
        command=command,
        cwd=cwd_str,
        exit_code=proc.returncode if proc.returncode is not None else 0,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
