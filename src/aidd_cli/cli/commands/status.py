"""``aidd status`` - overview of all planned issues."""

from __future__ import annotations

import typer

from aidd_cli.cli.helpers import get_workspace, handle_errors
from aidd_cli.status import show_status


def status(ctx: typer.Context) -> None:
    """Show status of all issues."""
    with handle_errors():
        show_status(get_workspace(ctx))


__all__ = ["status"]
