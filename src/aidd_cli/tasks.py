"""Task lifecycle: todo -> doing (``task run``) -> done (``task done``)."""

from __future__ import annotations

import logging
from pathlib import Path

from aidd_cli.core import process
from aidd_cli.core.config import Workspace
from aidd_cli.core.errors import AiddError, CommandFailedError, FrontmatterError, UserInputError
from aidd_cli.core.paths import TASK_FILENAME
from aidd_cli.core.reporting import emit, info, warn
from aidd_cli.frontmatter import read_task, update_status
from aidd_cli.pull_request import create_pull_request
from aidd_cli.worktree import ensure_worktree

__all__ = [
    "STATUS_TODO",
    "STATUS_DOING",
    "STATUS_DONE",
    "run_task",
    "complete_task",
    "all_tasks_done",
    "sync_plan_status",
]

logger = logging.getLogger(__name__)

STATUS_TODO = "todo"
STATUS_DOING = "doing"
STATUS_DONE = "done"


def _require_task_documents(ws: Workspace) -> None:
    if not ws.uses_task_documents:
        raise UserInputError(
            f"Task commands need per-task documents, but schema is '{ws.config.schema}'. "
            "Set 'schema: tasks' in .aidd/config.yaml."
        )


def run_task(ws: Workspace, issue: int, task: int) -> Path:
    """Prepare the task's worktree and mark the task as ``doing``.

    Returns:
        Path of the worktree.
    """
    _require_task_documents(ws)
    task_path = ws.task_file(issue, task)
    if not task_path.exists():
        raise UserInputError(f"{TASK_FILENAME} not found: {task_path}. Run 'aidd issue plan {issue}' first.")

    meta = read_task(task_path)
    info(f"Task {issue}/{task}: status={meta.status}, branch={meta.branch_name}")

    wt_path = ensure_worktree(ws, issue, task)

    update_status(task_path, STATUS_DOING)
    info(f"Updated {TASK_FILENAME} status to: {STATUS_DOING}")

    try:
        document = task_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise AiddError(f"Failed to read {task_path}") from exc
    emit("")
    emit(document)
    return wt_path


def _has_staged_changes(wt_path: Path) -> bool:
    try:
        process.run_command("git", ["diff", "--cached", "--quiet"], wt_path)
    except CommandFailedError:
        return True
    return False


def complete_task(ws: Workspace, issue: int, task: int) -> str:
    """Lint, test, commit, push and open a PR, then mark the task ``done``.

    Lint failures abort; test failures only warn.

    Returns:
        The pull request URL printed by gh.
    """
    _require_task_documents(ws)
    wt_path = ws.worktree_path(issue, task)
    task_path = ws.task_file(issue, task)

    if not wt_path.exists():
        raise UserInputError(f"Worktree not found: {wt_path}. Run 'aidd wt ensure {issue} {task}' first.")

    lint = ws.config.lint
    info("Running lint...")
    try:
        process.run_command_inherit(lint.program, lint.args, wt_path)
    except AiddError as exc:
        raise AiddError("Lint failed. Fix errors before completing the task.") from exc

    test = ws.config.test
    info("Running tests...")
    try:
        process.run_command_inherit(test.program, test.args, wt_path)
    except AiddError as exc:
        logger.debug("Test run failed: %s", exc)
        warn("Tests failed or no tests found, continuing...")

    info("Staging changes...")
    try:
        process.run_command("git", ["add", "-A"], wt_path)
    except AiddError as exc:
        raise AiddError("Failed to stage changes") from exc

    if _has_staged_changes(wt_path):
        info("Committing...")
        try:
            process.run_command_inherit("git", ["commit"], wt_path)
        except AiddError as exc:
            raise AiddError("Commit failed") from exc
    else:
        info("No changes to commit")

    url = create_pull_request(ws, issue, task, verification=[str(lint), str(test)])
    if url:
        emit(url)

    if task_path.exists():
        update_status(task_path, STATUS_DONE)
        info(f"Updated {TASK_FILENAME} status to: {STATUS_DONE}")

    sync_plan_status(ws, issue)
    info(f"Task {issue}/{task} completed!")
    return url


def all_tasks_done(ws: Workspace, issue: int) -> bool:
    """True when every readable TASK.md under the issue reports ``done``."""
    issue_dir = ws.features_dir(issue)
    if not issue_dir.is_dir():
        return False

    for entry in sorted(issue_dir.iterdir()):
        task_path = entry / TASK_FILENAME
        if not entry.is_dir() or not task_path.exists():
            continue
        try:
            meta = read_task(task_path)
        except FrontmatterError as exc:
            logger.debug("Skipping unreadable task document: %s", exc)
            continue
        if meta.status != STATUS_DONE:
            return False
    return True


def sync_plan_status(ws: Workspace, issue: int) -> bool:
    """Mark PLAN.md ``done`` once all tasks are done. Returns True if it changed."""
    if not all_tasks_done(ws, issue):
        return False
    plan_path = ws.plan_file(issue)
    if not plan_path.exists():
        return False
    update_status(plan_path, STATUS_DONE)
    info("All tasks done! Updated PLAN.md status to: done")
    return True
