"""Ship the application: push migrations, build, deploy.

Steps come from ``deploy.steps`` in .aidd/config.yaml and run in order; the
first failure stops the rest.
"""

from __future__ import annotations

from typing import Callable, Optional

from aidd_cli.core import process
from aidd_cli.core.config import Workspace
from aidd_cli.core.errors import AiddError, CommandFailedError
from aidd_cli.core.reporting import info

__all__ = [
    "STEP_RUNNING",
    "STEP_DONE",
    "STEP_ERROR",
    "STEP_SKIPPED",
    "StepCallback",
    "deploy",
]

STEP_RUNNING = "running"
STEP_DONE = "done"
STEP_ERROR = "error"
STEP_SKIPPED = "skipped"

# (1-based step index, status, detail)
StepCallback = Callable[[int, str, str], None]


def _ignore(index: int, status: str, detail: str) -> None:
    pass


def deploy(ws: Workspace, on_step: Optional[StepCallback] = None) -> None:
    """Run every configured deploy step, reporting progress through ``on_step``."""
    steps = ws.config.deploy_steps
    notify = on_step or _ignore

    total = len(steps)
    for index, step in enumerate(steps, start=1):
        cwd = ws.root / step.cwd
        info(f"Step {index}/{total}: {step.command} (in {step.cwd})")
        notify(index, STEP_RUNNING, "")
        try:
            process.run_command_inherit(step.command.program, step.command.args, cwd)
        except AiddError as exc:
            detail = f"exit {exc.returncode}" if isinstance(exc, CommandFailedError) else "could not start"
            notify(index, STEP_ERROR, detail)
            for skipped in range(index + 1, total + 1):
                notify(skipped, STEP_SKIPPED, "not run")
            raise AiddError(f"Deploy step {index}/{total} failed") from exc
        notify(index, STEP_DONE, "")

    info("Deploy complete.")
