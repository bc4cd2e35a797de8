"""Tests for the deploy sequence."""

import pytest

from aidd_cli.core.errors import AiddError
from aidd_cli.deploy import deploy


@pytest.fixture()
def events():
    recorded: list[tuple[int, str, str]] = []

    def on_step(index: int, status: str, detail: str) -> None:
        recorded.append((index, status, detail))

    on_step.recorded = recorded
    return on_step


def test_runs_default_steps_in_order(workspace, fake_commands, events):
    deploy(workspace, events)

    assert [(c.argv, c.cwd) for c in fake_commands.calls] == [
        (("supabase", "--workdir", "packages/platform/supabase", "db", "push"), workspace.root / "."),
        (("bun", "run", "build"), workspace.root / "apps/web"),
        (("bunx", "wrangler", "deploy"), workspace.root / "apps/web"),
    ]
    assert all(c.mode == "inherit" for c in fake_commands.calls)
    assert events.recorded == [
        (1, "running", ""),
        (1, "done", ""),
        (2, "running", ""),
        (2, "done", ""),
        (3, "running", ""),
        (3, "done", ""),
    ]


def test_first_failure_stops_the_rest(workspace, fake_commands, events):
    fake_commands.fail("bun", "run", "build", returncode=2)

    with pytest.raises(AiddError, match=r"Deploy step 2/3 failed"):
        deploy(workspace, events)

    assert not fake_commands.called("bunx")
    assert events.recorded[-3:] == [
        (2, "running", ""),
        (2, "error", "exit 2"),
        (3, "skipped", "not run"),
    ]


def test_missing_program(workspace, fake_commands):
    fake_commands.missing("supabase")
    with pytest.raises(AiddError, match=r"Deploy step 1/3 failed") as excinfo:
        deploy(workspace)
    assert "Is it installed?" in str(excinfo.value.__cause__)
    assert fake_commands.calls[-1].argv[0] == "supabase"
