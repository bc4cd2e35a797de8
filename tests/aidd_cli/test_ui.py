"""Tests for the step tracker."""

from rich.console import Console

from aidd_cli.cli.ui import StepTracker


def _render(tracker: StepTracker) -> str:
    console = Console(record=True, width=100)
    console.print(tracker.render())
    return console.export_text()


def test_statuses_and_details():
    tracker = StepTracker("Deploy")
    tracker.add("1", "bun run build")
    tracker.add("2", "bunx wrangler deploy")
    tracker.update("1", "done")
    tracker.update("2", "error", "exit 1")

    text = _render(tracker)
    assert "Deploy" in text
    assert "bun run build" in text
    assert "bunx wrangler deploy (exit 1)" in text


def test_add_is_idempotent_and_unknown_keys_are_appended():
    tracker = StepTracker("t")
    tracker.add("a", "first")
    tracker.add("a", "again")
    tracker.update("b", "skipped", "not run")
    assert [(s.key, s.label, s.status, s.detail) for s in tracker.steps] == [
        ("a", "first", "pending", ""),
        ("b", "b", "skipped", "not run"),
    ]


def test_labels_are_not_markup():
    tracker = StepTracker("[bold]x[/bold]")
    tracker.add("1", "echo [red]")
    text = _render(tracker)
    assert "[bold]x[/bold]" in text
    assert "echo [red]" in text
