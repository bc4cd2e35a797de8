"""``aidd pr`` - pull request operations."""

from __future__ import annotations

from typing import Optional

import typer
from typing_extensions import Annotated

from aidd_cli.cli.helpers import get_workspace, handle_errors
from aidd_cli.core.reporting import emit
from aidd_cli.pull_request import create_pull_request

app = typer.Typer(name="pr", help="Pull request operations", no_args_is_help=True)


@app.command()
def create(
    ctx: typer.Context,
    issue: Annotated[int, typer.Argument(help="Issue number")],
    task: Annotated[Optional[int], typer.Argument(help="Task number")] = None,
) -> None:
    """Push branch and create a pull request."""
    with handle_errors():
        output = create_pull_request(get_workspace(ctx), issue, task)
        if output:
            emit(output)


__all__ = ["app"]
