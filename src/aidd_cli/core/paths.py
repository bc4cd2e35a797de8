"""Naming policy for branches, worktrees, feature documents and service ports.

Everything here is a pure function of an issue number and an optional task
number, so the same inputs always map to the same names.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "BRANCH_PREFIX",
    "DEFAULT_FEATURES_DIR",
    "DEFAULT_WORKTREES_DIR",
    "PLAN_FILENAME",
    "TASK_FILENAME",
    "BASE_PORTS",
    "ServicePorts",
    "branch_name",
    "worktree_name",
    "worktree_path",
    "features_dir",
    "task_dir",
    "plan_file",
    "task_file",
    "port_offset",
    "service_ports",
    "service_project_id",
]

BRANCH_PREFIX = "feat"
DEFAULT_FEATURES_DIR = "features"
DEFAULT_WORKTREES_DIR = ".worktrees"
PLAN_FILENAME = "PLAN.md"
TASK_FILENAME = "TASK.md"

# Default local ports of a supabase instance.
BASE_PORTS: dict[str, int] = {
    "api": 54321,
    "db": 54322,
    "shadow": 54320,
    "studio": 54323,
    "inbucket": 54324,
    "analytics": 54327,
    "pooler": 54329,
    "inspector": 8083,
}


def worktree_name(issue: int, task: int | None = None) -> str:
    """Return the directory name shared by worktree and branch: ``issue-1-task-2``."""
    if task is None:
        return f"issue-{issue}"
    return f"issue-{issue}-task-{task}"


def branch_name(issue: int, task: int | None = None) -> str:
    """Return the feature branch for an issue or issue/task pair."""
    return f"{BRANCH_PREFIX}/{worktree_name(issue, task)}"


def worktree_path(
    root: Path,
    issue: int,
    task: int | None = None,
    worktrees_dir: str = DEFAULT_WORKTREES_DIR,
) -> Path:
    return root / worktrees_dir / worktree_name(issue, task)


def features_dir(root: Path, issue: int, base: str = DEFAULT_FEATURES_DIR) -> Path:
    return root / base / str(issue)


def task_dir(root: Path, issue: int, task: int, base: str = DEFAULT_FEATURES_DIR) -> Path:
    return features_dir(root, issue, base) / str(task)


def plan_file(root: Path, issue: int, base: str = DEFAULT_FEATURES_DIR) -> Path:
    return features_dir(root, issue, base) / PLAN_FILENAME


def task_file(root: Path, issue: int, task: int, base: str = DEFAULT_FEATURES_DIR) -> Path:
    return task_dir(root, issue, task, base) / TASK_FILENAME


def port_offset(issue: int, task: int | None = None) -> int:
    """Offset applied to every base port: ``issue * 100 (+ task * 10)``.

    The result is not range-checked; large issue numbers overflow the
    16-bit port space.
    """
    offset = issue * 100
    if task is not None:
        offset += task * 10
    return offset


@dataclass(frozen=True)
class ServicePorts:
    """Ports of one worktree-local service instance."""

    api: int
    db: int
    shadow: int
    studio: int
    inbucket: int
    analytics: int
    pooler: int
    inspector: int


def service_ports(issue: int, task: int | None = None) -> ServicePorts:
    offset = port_offset(issue, task)
    return ServicePorts(**{name: base + offset for name, base in BASE_PORTS.items()})


def service_project_id(base: str, issue: int, task: int | None = None) -> str:
    """Return the per-worktree project id, e.g. ``sample-i3`` or ``sample-i3-t2``."""
    if task is None:
        return f"{base}-i{issue}"
    return f"{base}-i{issue}-t{task}"
