"""Create and remove per-issue/task git worktrees."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from aidd_cli.core import process
from aidd_cli.core.config import Workspace
from aidd_cli.core.errors import AiddError
from aidd_cli.core.paths import branch_name
from aidd_cli.core.reporting import emit, info, warn
from aidd_cli.service import provision_service, service_config_path, stop_service

__all__ = ["branch_exists", "ensure_worktree", "remove_worktree"]

logger = logging.getLogger(__name__)


def _git(ws: Workspace, *args: str) -> str:
    return process.run_command("git", ["-C", str(ws.root), *args])


def branch_exists(ws: Workspace, branch: str) -> bool:
    """Return True if a local branch with this name exists."""
    try:
        return bool(_git(ws, "branch", "--list", branch))
    except AiddError as exc:
        logger.debug("Branch lookup for %s failed: %s", branch, exc)
        return False


def ensure_worktree(ws: Workspace, issue: int, task: int | None = None) -> Path:
    """Create the worktree for an issue/task unless it already exists.

    A new worktree gets its branch (reused if present, otherwise cut from the
    trunk branch), installed dependencies, a copy of the root env file and,
    when the checkout carries a service config, its own service instance.

    Returns:
        Path of the worktree.
    """
    branch = branch_name(issue, task)
    wt_path = ws.worktree_path(issue, task)

    if wt_path.exists():
        info(f"Worktree already exists: {wt_path}")
        emit(str(wt_path))
        return wt_path

    info(f"Creating worktree: {wt_path} (branch: {branch})")
    try:
        wt_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise AiddError(f"Failed to create directory: {wt_path.parent}") from exc

    if branch_exists(ws, branch):
        try:
            _git(ws, "worktree", "add", str(wt_path), branch)
        except AiddError as exc:
            raise AiddError("Failed to create worktree with existing branch") from exc
    else:
        try:
            _git(ws, "worktree", "add", "-b", branch, str(wt_path), ws.config.trunk_branch)
        except AiddError as exc:
            raise AiddError("Failed to create worktree with new branch") from exc

    info("Installing dependencies...")
    tool_install = ws.config.tool_install
    try:
        process.run_command(tool_install.program, tool_install.args, wt_path)
    except AiddError as exc:
        logger.debug("Tool install failed: %s", exc)
        warn(f"{tool_install} failed or {tool_install.program} not found, skipping")

    package_install = ws.config.package_install
    try:
        process.run_command(package_install.program, package_install.args, wt_path)
    except AiddError as exc:
        raise AiddError(f"Failed to run {package_install}") from exc

    env_src = ws.root / ws.config.env_file
    if env_src.exists():
        try:
            shutil.copyfile(env_src, wt_path / ws.config.env_file)
        except OSError as exc:
            raise AiddError(f"Failed to copy {ws.config.env_file}") from exc
        info(f"Copied {ws.config.env_file} from root")

    if service_config_path(ws, wt_path).exists():
        provision_service(ws, wt_path, issue, task)

    info(f"Worktree ready: {wt_path}")
    emit(str(wt_path))
    return wt_path


def remove_worktree(ws: Workspace, issue: int, task: int | None = None) -> None:
    """Stop the worktree's service, remove the worktree and delete its merged branch.

    Removing a worktree that does not exist is not an error, and an unmerged
    branch is kept with a warning.
    """
    branch = branch_name(issue, task)
    wt_path = ws.worktree_path(issue, task)

    if service_config_path(ws, wt_path).exists():
        stop_service(ws, wt_path)

    if wt_path.exists():
        info(f"Removing worktree: {wt_path}")
        try:
            _git(ws, "worktree", "remove", str(wt_path), "--force")
        except AiddError as exc:
            raise AiddError("Failed to remove worktree") from exc
    else:
        info(f"Worktree does not exist: {wt_path}")

    if branch_exists(ws, branch):
        info(f"Deleting branch: {branch}")
        try:
            _git(ws, "branch", "-d", branch)
        except AiddError:
            warn(f"Branch {branch} not fully merged. Use 'git branch -D {branch}' to force delete.")
