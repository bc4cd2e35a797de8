"""``aidd issue`` - issue planning."""

from __future__ import annotations

import typer
from typing_extensions import Annotated

from aidd_cli.cli.helpers import get_workspace, handle_errors
from aidd_cli.planner import plan_issue

app = typer.Typer(name="issue", help="Issue planning", no_args_is_help=True)


@app.command()
def plan(
    ctx: typer.Context,
    issue: Annotated[int, typer.Argument(help="Issue number")],
) -> None:
    """Generate PLAN.md (and TASK.md files) from a GitHub issue."""
    with handle_errors():
        plan_issue(get_workspace(ctx), issue)


__all__ = ["app"]
