"""Run external programs (git, gh, bun, supabase, ...)."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from aidd_cli.core.errors import CommandFailedError, CommandNotFoundError

__all__ = ["run_command", "run_command_inherit"]

logger = logging.getLogger(__name__)


def _describe(program: str, args: Sequence[str], cwd: Path | None) -> str:
    where = f" (in {cwd})" if cwd else ""
    return f"{' '.join([program, *args])}{where}"


def run_command(program: str, args: Sequence[str], cwd: Path | None = None) -> str:
    """Run a program, capture its output and return stripped stdout.

    Raises:
        CommandNotFoundError: The program could not be started.
        CommandFailedError: The program exited non-zero; carries stripped stderr.
    """
    logger.debug("Running: %s", _describe(program, args, cwd))
    try:
        completed = subprocess.run(
            [program, *args],
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise CommandNotFoundError(program) from exc

    if completed.returncode != 0:
        raise CommandFailedError(
            program,
            args,
            completed.returncode,
            (completed.stderr or "").strip(),
        )
    return (completed.stdout or "").strip()


def run_command_inherit(program: str, args: Sequence[str], cwd: Path | None = None) -> None:
    """Run a program attached to the current terminal (tests, commits, service CLIs)."""
    logger.debug("Running (interactive): %s", _describe(program, args, cwd))
    try:
        completed = subprocess.run(
            [program, *args],
            cwd=str(cwd) if cwd else None,
            check=False,
        )
    except OSError as exc:
        raise CommandNotFoundError(program) from exc

    if completed.returncode != 0:
        raise CommandFailedError(program, args, completed.returncode)
