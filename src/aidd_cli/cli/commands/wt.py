"""``aidd wt`` - worktree management."""

from __future__ import annotations

from typing import Optional

import typer
from typing_extensions import Annotated

from aidd_cli.cli.helpers import get_workspace, handle_errors
from aidd_cli.worktree import ensure_worktree, remove_worktree

app = typer.Typer(name="wt", help="Worktree management", no_args_is_help=True)


@app.command()
def ensure(
    ctx: typer.Context,
    issue: Annotated[int, typer.Argument(help="Issue number")],
    task: Annotated[Optional[int], typer.Argument(help="Task number")] = None,
) -> None:
    """Create worktree + branch + install deps (idempotent)."""
    with handle_errors():
        ensure_worktree(get_workspace(ctx), issue, task)


@app.command()
def remove(
    ctx: typer.Context,
    issue: Annotated[int, typer.Argument(help="Issue number")],
    task: Annotated[Optional[int], typer.Argument(help="Task number")] = None,
) -> None:
    """Remove worktree + clean up branch."""
    with handle_errors():
        remove_worktree(get_workspace(ctx), issue, task)


__all__ = ["app"]
