"""Generate PLAN.md (and TASK.md files) from a GitHub issue.

The issue is read with ``gh issue view``; checklist items in its body become
the task list. Documents are rendered from ``<templates_dir>/PLAN.md`` and
``<templates_dir>/TASK.md`` when those files exist, otherwise from the
built-in layouts below. Templates use ``{{name}}`` placeholders.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from aidd_cli.core import process
from aidd_cli.core.config import Workspace
from aidd_cli.core.errors import AiddError, UserInputError
from aidd_cli.core.paths import PLAN_FILENAME, TASK_FILENAME, branch_name
from aidd_cli.core.reporting import info
from aidd_cli.frontmatter import format_scalar

__all__ = [
    "TIMESTAMP_FORMAT",
    "PLAN_STATUS_DRAFT",
    "TASK_STATUS_TODO",
    "Issue",
    "PlanResult",
    "fetch_issue",
    "extract_tasks",
    "render_template",
    "render_plan",
    "render_task",
    "plan_issue",
]

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
PLAN_STATUS_DRAFT = "draft"
TASK_STATUS_TODO = "todo"
CHECKBOX_MARKERS = ("- [ ] ", "- [x] ")
LONG_TASK_CHARS = 50

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")

DEFAULT_PLAN_TEMPLATE = """---
issueNumber: {{issue}}
title: {{title_field}}
status: {{status}}
ownerAgent: {{owner_agent}}
createdAt: {{created_at}}
---

# Goal
{{title}}

# Scope
{{scope}}

{{task_table}}# Risks
<!-- Implementation risks and mitigations -->

# Definition of Done
- [ ] All tasks are done
- [ ] lint/test pass
- [ ] PR reviewed
"""

DEFAULT_TASK_TEMPLATE = """---
issueNumber: {{issue}}
taskNumber: {{task}}
status: {{status}}
branchName: {{branch}}
worktreePath: {{worktree_path}}
---

# Context
{{description}}

# Implementation Steps
1. Analyze requirements from the task description
2. Implement the changes
3. Add tests where applicable

# Files to Change
- TBD (to be determined during implementation)

# Verification
- [ ] `{{lint_command}}` passes
- [ ] `{{test_command}}` passes (when tests exist)
- [ ] Manual checks (when applicable)

# Commit Plan
- `feat(issue-{{issue}}): task {{task}} - {{description}}`
"""


@dataclass(frozen=True)
class Issue:
    number: int
    title: str
    body: str = ""


@dataclass
class PlanResult:
    plan_path: Path
    tasks: list[str] = field(default_factory=list)
    task_paths: list[Path] = field(default_factory=list)


def fetch_issue(ws: Workspace, issue: int) -> Issue:
    """Read an issue's number, title and body through the gh CLI."""
    try:
        raw = process.run_command(
            "gh",
            ["issue", "view", str(issue), "--json", "number,title,body"],
            ws.root,
        )
    except AiddError as exc:
        raise AiddError("Failed to fetch issue. Is `gh` authenticated?") from exc

    try:
        data = json.loads(raw)
        return Issue(
            number=int(data.get("number") or issue),
            title=str(data["title"]),
            body=data.get("body") or "",
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as exc:
        raise AiddError("Failed to parse issue JSON") from exc


def extract_tasks(body: str) -> list[str]:
    """Return checklist item texts (checked or not) in body order."""
    tasks: list[str] = []
    for line in body.splitlines():
        stripped = line.strip()
        for marker in CHECKBOX_MARKERS:
            if stripped.startswith(marker):
                text = stripped[len(marker) :].strip()
                if text:
                    tasks.append(text)
                break
    return tasks


def render_template(template: str, values: dict[str, str]) -> str:
    """Substitute ``{{name}}`` placeholders; unknown names are left as written."""
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def _load_template(ws: Workspace, filename: str, default: str) -> str:
    path = ws.templates_dir / filename
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.debug("Template %s unavailable, using built-in layout", path)
        return default


def _now_utc() -> str:
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _task_table(issue: int, tasks: list[str]) -> str:
    if not tasks:
        return ""
    rows = [
        "# Task Breakdown",
        "| # | Summary | Branch | Estimate |",
        "|---|---------|--------|----------|",
    ]
    for number, description in enumerate(tasks, start=1):
        estimate = "M" if len(description) > LONG_TASK_CHARS else "S"
        cell = description.replace("|", "\\|")
        rows.append(f"| {number} | {cell} | {branch_name(issue, number)} | {estimate} |")
    return "\n".join(rows) + "\n\n"


def render_plan(
    ws: Workspace,
    issue: int,
    title: str,
    tasks: list[str],
    created_at: str | None = None,
) -> str:
    if ws.uses_task_documents:
        scope = f"See individual task definitions in `{ws.config.features_dir}/{issue}/*/{TASK_FILENAME}`."
    else:
        scope = f"Work happens on `{branch_name(issue)}`; tick the checklist in the issue as it progresses."
    values = {
        "issue": str(issue),
        "title": title,
        "title_field": format_scalar(title, quote=True),
        "status": PLAN_STATUS_DRAFT,
        "owner_agent": format_scalar(ws.config.owner_agent),
        "created_at": created_at or _now_utc(),
        "scope": scope,
        "task_table": _task_table(issue, tasks),
    }
    return render_template(_load_template(ws, PLAN_FILENAME, DEFAULT_PLAN_TEMPLATE), values)


def render_task(ws: Workspace, issue: int, task: int, description: str) -> str:
    values = {
        "issue": str(issue),
        "task": str(task),
        "status": TASK_STATUS_TODO,
        "branch": branch_name(issue, task),
        "worktree_path": ws.worktree_relpath(issue, task),
        "description": description,
        "lint_command": str(ws.config.lint),
        "test_command": str(ws.config.test),
    }
    return render_template(_load_template(ws, TASK_FILENAME, DEFAULT_TASK_TEMPLATE), values)


def _write(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise AiddError(f"Failed to write {path}") from exc
    info(f"Generated: {path}")


def plan_issue(ws: Workspace, issue: int) -> PlanResult:
    """Fetch an issue and write its planning documents.

    Under the ``tasks`` schema an issue without checklist items is rejected
    and every item gets ``<features>/<issue>/<n>/TASK.md``, numbered from 1.
    """
    info(f"Fetching issue #{issue}...")
    gh_issue = fetch_issue(ws, issue)
    tasks = extract_tasks(gh_issue.body)

    if not tasks and ws.uses_task_documents:
        raise UserInputError(
            f"No task items found in issue #{issue} body. "
            "Add checklist items (- [ ] ...) to the issue body."
        )
    info(f"Found {len(tasks)} tasks in issue #{issue}")

    result = PlanResult(plan_path=ws.plan_file(issue), tasks=tasks)
    _write(result.plan_path, render_plan(ws, issue, gh_issue.title, tasks))

    if ws.uses_task_documents:
        for number, description in enumerate(tasks, start=1):
            task_path = ws.task_file(issue, number)
            _write(task_path, render_task(ws, issue, number, description))
            result.task_paths.append(task_path)

    info(f"Plan generated: {len(tasks)} tasks for issue #{issue}")
    return result
