from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional

import pytest

from aidd_cli.core import process
from aidd_cli.core.config import AiddConfig, Workspace
from aidd_cli.core.errors import CommandFailedError, CommandNotFoundError


@dataclass
class CommandCall:
    mode: str  # "capture" or "inherit"
    argv: tuple[str, ...]
    cwd: Optional[Path]


@dataclass
class _Response:
    output: str = ""
    returncode: int = 0
    stderr: str = ""
    missing: bool = False
    effect: Optional[Callable[[tuple[str, ...], Optional[Path]], None]] = None


@dataclass
class FakeCommands:
    """Stand-in for external programs.

    Calls are recorded with git's ``-C <root>`` prefix removed; responses are
    matched by the longest registered argv prefix.
    """

    calls: list[CommandCall] = field(default_factory=list)
    _responses: dict[tuple[str, ...], _Response] = field(default_factory=dict)

    def respond(self, *argv: str, output: str = "", effect=None) -> None:
        self._responses[argv] = _Response(output=output, effect=effect)

    def fail(self, *argv: str, returncode: int = 1, stderr: str = "boom") -> None:
        self._responses[argv] = _Response(returncode=returncode, stderr=stderr)

    def missing(self, *argv: str) -> None:
        self._responses[argv] = _Response(missing=True)

    @property
    def argvs(self) -> list[tuple[str, ...]]:
        return [call.argv for call in self.calls]

    def called(self, *prefix: str) -> bool:
        return any(argv[: len(prefix)] == prefix for argv in self.argvs)

    def index_of(self, *prefix: str) -> int:
        for index, argv in enumerate(self.argvs):
            if argv[: len(prefix)] == prefix:
                return index
        raise AssertionError(f"{prefix} was not called; calls: {self.argvs}")

    def _normalize(self, program: str, args) -> tuple[str, ...]:
        args = list(args)
        if program == "git" and args[:1] == ["-C"]:
            args = args[2:]
        return (program, *args)

    def _dispatch(self, mode: str, program: str, args, cwd: Optional[Path]) -> str:
        argv = self._normalize(program, args)
        self.calls.append(CommandCall(mode, argv, cwd))
        matches = [key for key in self._responses if argv[: len(key)] == key]
        if not matches:
            return ""
        response = self._responses[max(matches, key=len)]
        if response.missing:
            raise CommandNotFoundError(program)
        if response.returncode:
            raise CommandFailedError(
                program,
                list(args),
                response.returncode,
                response.stderr if mode == "capture" else None,
            )
        if response.effect is not None:
            response.effect(argv, cwd)
        return response.output

    def run_command(self, program, args, cwd=None) -> str:
        return self._dispatch("capture", program, args, cwd)

    def run_command_inherit(self, program, args, cwd=None) -> None:
        self._dispatch("inherit", program, args, cwd)


@pytest.fixture()
def fake_commands(monkeypatch) -> Iterator[FakeCommands]:
    fake = FakeCommands()
    monkeypatch.setattr(process, "run_command", fake.run_command)
    monkeypatch.setattr(process, "run_command_inherit", fake.run_command_inherit)
    yield fake


@pytest.fixture()
def repo_root(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture()
def workspace(repo_root: Path) -> Workspace:
    return Workspace(root=repo_root, config=AiddConfig())


def make_worktree(argv: tuple[str, ...], cwd) -> None:
    """Effect for ``git worktree add``: create the checkout directory."""
    args = [a for a in argv[3:] if a != "-b"]
    # new branch form: worktree add -b <branch> <path> <trunk>
    path = Path(args[1]) if "-b" in argv else Path(args[0])
    path.mkdir(parents=True, exist_ok=True)


PLAN_DOC = """---
issueNumber: 7
title: "Add login form"
status: draft
ownerAgent: claude
createdAt: 2026-01-01T00:00:00Z
---

# Goal
Add login form
"""


def task_doc(issue: int, task: int, status: str = "todo") -> str:
    return (
        "---\n"
        f"issueNumber: {issue}\n"
        f"taskNumber: {task}\n"
        f"status: {status}\n"
        f"branchName: feat/issue-{issue}-task-{task}\n"
        f"worktreePath: .worktrees/issue-{issue}-task-{task}\n"
        "---\n"
        "\n"
        "# Context\n"
        "Do the thing\n"
    )


@pytest.fixture()
def write_plan(workspace: Workspace):
    def _write(issue: int = 7, content: str = PLAN_DOC) -> Path:
        path = workspace.plan_file(issue)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def write_task(workspace: Workspace):
    def _write(issue: int, task: int, status: str = "todo") -> Path:
        path = workspace.task_file(issue, task)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(task_doc(issue, task, status), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def worktree_effect():
    return make_worktree


@pytest.fixture()
def plan_doc() -> str:
    return PLAN_DOC
