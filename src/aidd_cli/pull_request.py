"""Push a feature branch and open a pull request for it."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from aidd_cli.core import process
from aidd_cli.core.config import Workspace
from aidd_cli.core.errors import AiddError
from aidd_cli.core.paths import branch_name
from aidd_cli.core.reporting import info

__all__ = [
    "DEFAULT_SUBJECT",
    "latest_commit",
    "pr_title",
    "pr_body",
    "push_branch",
    "create_pull_request",
]

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Implementation"


def latest_commit(work_dir: Path) -> tuple[str, str]:
    """Return (subject, body) of HEAD, with fallbacks when git log fails."""
    try:
        subject = process.run_command("git", ["log", "-1", "--format=%s"], work_dir)
    except AiddError as exc:
        logger.debug("Could not read commit subject: %s", exc)
        subject = DEFAULT_SUBJECT
    try:
        body = process.run_command("git", ["log", "-1", "--format=%b"], work_dir)
    except AiddError as exc:
        logger.debug("Could not read commit body: %s", exc)
        body = ""
    return subject or DEFAULT_SUBJECT, body


def pr_title(issue: int, task: int | None, subject: str) -> str:
    if task is None:
        return f"[ISSUE-{issue}] {subject}"
    return f"[TASK-{issue}-{task}] {subject}"


def pr_body(issue: int, commit_body: str, verification: Sequence[str] = ()) -> str:
    body = f"## Summary\n{commit_body}\n\n## Related Issue\nCloses #{issue}"
    if verification:
        checks = "\n".join(f"- [x] {item}" for item in verification)
        body += f"\n\n## Verification\n{checks}"
    return body


def push_branch(branch: str, work_dir: Path) -> None:
    info("Pushing branch...")
    try:
        process.run_command("git", ["push", "-u", "origin", branch], work_dir)
    except AiddError as exc:
        raise AiddError("Failed to push branch") from exc


def create_pull_request(
    ws: Workspace,
    issue: int,
    task: int | None = None,
    *,
    verification: Sequence[str] = (),
) -> str:
    """Push the issue/task branch and run ``gh pr create``.

    Runs inside the worktree when it exists, otherwise at the repository root.

    Returns:
        gh's output (normally the pull request URL).
    """
    branch = branch_name(issue, task)
    wt_path = ws.worktree_path(issue, task)
    work_dir = wt_path if wt_path.exists() else ws.root

    push_branch(branch, work_dir)

    info("Creating PR...")
    subject, commit_body = latest_commit(work_dir)
    try:
        output = process.run_command(
            "gh",
            [
                "pr",
                "create",
                "--title",
                pr_title(issue, task, subject),
                "--body",
                pr_body(issue, commit_body, verification),
            ],
            work_dir,
        )
    except AiddError as exc:
        raise AiddError("Failed to create PR") from exc

    info("PR created!")
    return output
