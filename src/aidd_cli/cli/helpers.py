"""Shared state and error handling for CLI commands."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import typer

from aidd_cli.core.config import Workspace
from aidd_cli.core.errors import AiddError, format_error
from aidd_cli.core.reporting import error

__all__ = ["AppState", "get_workspace", "handle_errors"]


@dataclass
class AppState:
    """Global options, attached to the root typer context."""

    verbose: bool = False
    repo_root: Path | None = None
    _workspace: Workspace | None = field(default=None, repr=False)

    @property
    def workspace(self) -> Workspace:
        if self._workspace is None:
            self._workspace = Workspace.discover(self.repo_root)
        return self._workspace


def get_workspace(ctx: typer.Context) -> Workspace:
    state = ctx.find_object(AppState)
    if state is None:
        state = AppState()
        ctx.obj = state
    return state.workspace


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report ``AiddError`` on stderr and exit with status 1."""
    try:
        yield
    except AiddError as exc:
        error(format_error(exc))
        raise typer.Exit(1) from exc
