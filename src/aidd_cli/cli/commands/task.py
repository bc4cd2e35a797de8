"""``aidd task`` - drive a single task through todo -> doing -> done."""

from __future__ import annotations

import typer
from typing_extensions import Annotated

from aidd_cli.cli.helpers import get_workspace, handle_errors
from aidd_cli.tasks import complete_task, run_task

app = typer.Typer(name="task", help="Task execution", no_args_is_help=True)


@app.command()
def run(
    ctx: typer.Context,
    issue: Annotated[int, typer.Argument(help="Issue number")],
    task: Annotated[int, typer.Argument(help="Task number")],
) -> None:
    """Prepare the worktree and mark the task as doing."""
    with handle_errors():
        run_task(get_workspace(ctx), issue, task)


@app.command()
def done(
    ctx: typer.Context,
    issue: Annotated[int, typer.Argument(help="Issue number")],
    task: Annotated[int, typer.Argument(help="Task number")],
) -> None:
    """Lint, test, commit, push, open a PR and mark the task as done."""
    with handle_errors():
        complete_task(get_workspace(ctx), issue, task)


__all__ = ["app"]
