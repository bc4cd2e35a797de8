"""Tests for the task lifecycle (run / done) and plan status sync."""

from pathlib import Path

import pytest

from aidd_cli.core.config import AiddConfig, DocumentSchema, Workspace
from aidd_cli.core.errors import AiddError, UserInputError
from aidd_cli.frontmatter import read_plan, read_task
from aidd_cli.tasks import all_tasks_done, complete_task, run_task, sync_plan_status

PR_URL = "https://github.com/acme/app/pull/12"


class TestRunTask:
    def test_marks_task_doing_and_prints_document(self, workspace, fake_commands, worktree_effect, write_task, capsys):
        task_path = write_task(7, 1)
        fake_commands.respond("git", "worktree", "add", effect=worktree_effect)

        wt_path = run_task(workspace, 7, 1)

        assert wt_path == workspace.worktree_path(7, 1)
        assert wt_path.is_dir()
        assert read_task(task_path).status == "doing"
        out = capsys.readouterr().out
        assert "status: doing" in out
        assert "# Context" in out

    def test_missing_task_document(self, workspace, fake_commands):
        with pytest.raises(UserInputError, match=r"Run 'aidd issue plan 7' first"):
            run_task(workspace, 7, 1)
        assert fake_commands.calls == []

    def test_worktree_failure_leaves_status(self, workspace, fake_commands, write_task):
        task_path = write_task(7, 1)
        fake_commands.fail("git", "worktree", "add")
        with pytest.raises(AiddError):
            run_task(workspace, 7, 1)
        assert read_task(task_path).status == "todo"

    def test_unreadable_document_after_update_is_reported(
        self, workspace, fake_commands, worktree_effect, write_task, monkeypatch
    ):
        write_task(7, 1)
        fake_commands.respond("git", "worktree", "add", effect=worktree_effect)

        def denied(self, *args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(Path, "read_text", denied)
        with pytest.raises(AiddError, match="Failed to read") as excinfo:
            run_task(workspace, 7, 1)
        assert isinstance(excinfo.value.__cause__, PermissionError)

    def test_plan_schema_rejects_task_commands(self, repo_root, fake_commands):
        ws = Workspace(root=repo_root, config=AiddConfig(schema=DocumentSchema.PLAN))
        with pytest.raises(UserInputError, match="schema: tasks"):
            run_task(ws, 7, 1)


@pytest.fixture()
def task_in_progress(workspace, write_plan, write_task):
    write_plan(7)
    task_path = write_task(7, 1, status="doing")
    workspace.worktree_path(7, 1).mkdir(parents=True)
    return task_path


class TestCompleteTask:
    def test_full_flow(self, workspace, fake_commands, task_in_progress, capsys):
        fake_commands.fail("git", "diff", "--cached", "--quiet")
        fake_commands.respond("git", "log", "-1", "--format=%s", output="Add form")
        fake_commands.respond("gh", "pr", "create", output=PR_URL)

        url = complete_task(workspace, 7, 1)

        assert url == PR_URL
        order = [
            fake_commands.index_of("mise", "run", "lint"),
            fake_commands.index_of("bun", "test"),
            fake_commands.index_of("git", "add", "-A"),
            fake_commands.index_of("git", "commit"),
            fake_commands.index_of("git", "push", "-u", "origin", "feat/issue-7-task-1"),
            fake_commands.index_of("gh", "pr", "create"),
        ]
        assert order == sorted(order)
        wt_path = workspace.worktree_path(7, 1)
        assert all(call.cwd == wt_path for call in fake_commands.calls)

        pr_call = fake_commands.calls[fake_commands.index_of("gh", "pr", "create")]
        assert pr_call.argv[pr_call.argv.index("--title") + 1] == "[TASK-7-1] Add form"
        body = pr_call.argv[pr_call.argv.index("--body") + 1]
        assert "Closes #7" in body
        assert "- [x] mise run lint" in body

        assert read_task(task_in_progress).status == "done"
        assert read_plan(workspace.plan_file(7)).status == "done"
        assert PR_URL in capsys.readouterr().out

    def test_lint_failure_aborts(self, workspace, fake_commands, task_in_progress):
        fake_commands.fail("mise", "run", "lint")
        with pytest.raises(AiddError, match="Lint failed"):
            complete_task(workspace, 7, 1)
        assert not fake_commands.called("git")
        assert read_task(task_in_progress).status == "doing"

    def test_test_failure_continues(self, workspace, fake_commands, task_in_progress, capsys):
        fake_commands.fail("bun", "test")
        complete_task(workspace, 7, 1)
        assert "Tests failed or no tests found, continuing..." in capsys.readouterr().err
        assert fake_commands.called("gh", "pr", "create")

    def test_nothing_staged_skips_commit(self, workspace, fake_commands, task_in_progress, capsys):
        complete_task(workspace, 7, 1)
        assert not fake_commands.called("git", "commit")
        assert "No changes to commit" in capsys.readouterr().err
        assert fake_commands.called("git", "push")

    def test_commit_failure(self, workspace, fake_commands, task_in_progress):
        fake_commands.fail("git", "diff", "--cached")
        fake_commands.fail("git", "commit")
        with pytest.raises(AiddError, match="Commit failed"):
            complete_task(workspace, 7, 1)
        assert not fake_commands.called("git", "push")

    def test_push_failure_leaves_status(self, workspace, fake_commands, task_in_progress):
        fake_commands.fail("git", "push")
        with pytest.raises(AiddError, match="Failed to push branch"):
            complete_task(workspace, 7, 1)
        assert read_task(task_in_progress).status == "doing"

    def test_missing_worktree(self, workspace, fake_commands, write_task):
        write_task(7, 1)
        with pytest.raises(UserInputError, match=r"Run 'aidd wt ensure 7 1' first"):
            complete_task(workspace, 7, 1)
        assert fake_commands.calls == []

    def test_plan_stays_open_while_tasks_remain(self, workspace, fake_commands, task_in_progress, write_task):
        write_task(7, 2, status="todo")
        complete_task(workspace, 7, 1)
        assert read_task(task_in_progress).status == "done"
        assert read_plan(workspace.plan_file(7)).status == "draft"


class TestPlanSync:
    def test_all_tasks_done(self, workspace, write_task):
        write_task(3, 1, status="done")
        write_task(3, 2, status="done")
        assert all_tasks_done(workspace, 3) is True

    def test_one_task_open(self, workspace, write_task):
        write_task(3, 1, status="done")
        write_task(3, 2, status="doing")
        assert all_tasks_done(workspace, 3) is False

    def test_missing_issue_directory(self, workspace):
        assert all_tasks_done(workspace, 99) is False

    def test_unreadable_task_is_skipped(self, workspace, write_task):
        write_task(3, 1, status="done")
        broken = workspace.task_file(3, 2)
        broken.parent.mkdir(parents=True)
        broken.write_text("no frontmatter\n", encoding="utf-8")
        assert all_tasks_done(workspace, 3) is True

    def test_non_utf8_task_is_skipped(self, workspace, write_plan, write_task):
        write_plan(3)
        write_task(3, 1, status="done")
        broken = workspace.task_file(3, 2)
        broken.parent.mkdir(parents=True)
        broken.write_bytes(b"\xff\xfe")
        assert all_tasks_done(workspace, 3) is True
        assert sync_plan_status(workspace, 3) is True
        assert read_plan(workspace.plan_file(3)).status == "done"

    def test_sync_updates_plan(self, workspace, write_plan, write_task):
        write_plan(7)
        write_task(7, 1, status="done")
        assert sync_plan_status(workspace, 7) is True
        assert read_plan(workspace.plan_file(7)).status == "done"

    def test_sync_without_plan(self, workspace, write_task):
        write_task(7, 1, status="done")
        assert sync_plan_status(workspace, 7) is False
