"""``aidd deploy`` - push migrations, build and deploy."""

from __future__ import annotations

import typer

from aidd_cli.cli.helpers import get_workspace, handle_errors
from aidd_cli.cli.ui import StepTracker
from aidd_cli.core.reporting import err_console
from aidd_cli.deploy import deploy as run_deploy


def deploy(ctx: typer.Context) -> None:
    """Deploy database migrations and the web app (Supabase + Cloudflare Workers)."""
    tracker = StepTracker("Deploy")
    try:
        with handle_errors():
            ws = get_workspace(ctx)
            for index, step in enumerate(ws.config.deploy_steps, start=1):
                tracker.add(str(index), str(step.command))
            run_deploy(ws, lambda index, status, detail: tracker.update(str(index), status, detail))
    finally:
        if tracker.steps:
            err_console.print(tracker.render())


__all__ = ["deploy"]
