"""Aggregate PLAN.md / TASK.md statuses under the features directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from aidd_cli.core.config import Workspace
from aidd_cli.core.errors import FrontmatterError
from aidd_cli.core.paths import PLAN_FILENAME, TASK_FILENAME
from aidd_cli.core.reporting import emit, info
from aidd_cli.frontmatter import read_plan, read_task

__all__ = [
    "UNKNOWN_STATUS",
    "NO_FEATURES_MESSAGE",
    "TaskStatus",
    "IssueStatus",
    "collect_status",
    "format_status",
    "show_status",
]

logger = logging.getLogger(__name__)

UNKNOWN_STATUS = "unknown"
NO_FEATURES_MESSAGE = "No features found."


@dataclass(frozen=True)
class TaskStatus:
    number: str
    status: str
    branch: str = ""


@dataclass
class IssueStatus:
    issue: str
    has_plan: bool
    status: str = UNKNOWN_STATUS
    title: str = ""
    tasks: list[TaskStatus] = field(default_factory=list)


def _numeric_key(path: Path) -> tuple[int, int, str]:
    """Sort numerically by name; non-numeric names go last."""
    try:
        return (0, int(path.name), path.name)
    except ValueError:
        return (1, 0, path.name)


def _sorted_dirs(parent: Path) -> list[Path]:
    return sorted((p for p in parent.iterdir() if p.is_dir()), key=_numeric_key)


def _collect_tasks(issue_dir: Path) -> list[TaskStatus]:
    tasks: list[TaskStatus] = []
    for task_dir in _sorted_dirs(issue_dir):
        task_path = task_dir / TASK_FILENAME
        if not task_path.exists():
            continue
        try:
            meta = read_task(task_path)
        except FrontmatterError as exc:
            logger.debug("Unreadable task document: %s", exc)
            tasks.append(TaskStatus(number=task_dir.name, status=UNKNOWN_STATUS))
            continue
        tasks.append(TaskStatus(number=task_dir.name, status=meta.status, branch=meta.branch_name))
    return tasks


def collect_status(ws: Workspace) -> list[IssueStatus]:
    """Read every issue directory; missing or broken documents never raise."""
    root = ws.features_root
    if not root.is_dir():
        return []

    issues: list[IssueStatus] = []
    for issue_dir in _sorted_dirs(root):
        plan_path = issue_dir / PLAN_FILENAME
        entry = IssueStatus(issue=issue_dir.name, has_plan=plan_path.exists())
        if entry.has_plan:
            try:
                meta = read_plan(plan_path)
            except FrontmatterError as exc:
                logger.debug("Unreadable plan document: %s", exc)
            else:
                entry.status = meta.status
                entry.title = meta.title
        if ws.uses_task_documents:
            entry.tasks = _collect_tasks(issue_dir)
        issues.append(entry)
    return issues


def format_status(issues: list[IssueStatus]) -> list[str]:
    if not issues:
        return [NO_FEATURES_MESSAGE]
    lines: list[str] = []
    for entry in issues:
        if entry.has_plan:
            lines.append(f"Issue #{entry.issue}: [{entry.status}] {entry.title}".rstrip())
        else:
            lines.append(f"Issue #{entry.issue}: (no PLAN.md)")
        for task in entry.tasks:
            lines.append(f"  Task {task.number}: [{task.status}] {task.branch}".rstrip())
    return lines


def show_status(ws: Workspace) -> list[IssueStatus]:
    info("=== AI-Driven Development Status ===")
    issues = collect_status(ws)
    for line in format_status(issues):
        emit(line)
    return issues
