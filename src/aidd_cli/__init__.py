"""
aidd - AI-Driven Development CLI.

Manages git worktrees per issue/task, scaffolds planning documents from
GitHub issues and drives the feature-branch lifecycle.

Usage:
    aidd issue plan 12
    aidd task run 12 1
    aidd task done 12 1
    aidd status
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from aidd_cli.cli.commands import deploy as deploy_cmd
from aidd_cli.cli.commands import issue, pr, status as status_cmd, task, wt
from aidd_cli.cli.helpers import AppState
from aidd_cli.core.reporting import configure_logging, emit

try:
    __version__ = version("aidd-cli")
except PackageNotFoundError:
    __version__ = "0.0.0"

app = typer.Typer(
    name="aidd",
    help="AI-Driven Development CLI",
    add_completion=False,
    no_args_is_help=True,
)

app.add_typer(wt.app, name="wt")
app.add_typer(issue.app, name="issue")
app.add_typer(task.app, name="task")
app.add_typer(pr.app, name="pr")
app.command(name="status")(status_cmd.status)
app.command(name="deploy")(deploy_cmd.deploy)


def _version_callback(value: bool) -> None:
    if value:
        emit(f"aidd {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")] = False,
    repo_root: Annotated[
        Optional[Path],
        typer.Option(
            "--repo-root",
            help="Repository root (defaults to $AIDD_REPO_ROOT, then git rev-parse --show-toplevel)",
            file_okay=False,
        ),
    ] = None,
    show_version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit"),
    ] = False,
) -> None:
    """AI-Driven Development CLI."""
    configure_logging(verbose)
    ctx.obj = AppState(verbose=verbose, repo_root=repo_root)


def main() -> None:
    app()


__all__ = ["app", "main", "__version__"]
