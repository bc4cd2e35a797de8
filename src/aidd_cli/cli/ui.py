"""Rich rendering helpers for multi-step commands."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.markup import escape
from rich.tree import Tree

__all__ = ["Step", "StepTracker"]

_SYMBOLS = {
    "pending": "[green dim]○[/green dim]",
    "running": "[cyan]○[/cyan]",
    "done": "[green]●[/green]",
    "error": "[red]●[/red]",
    "skipped": "[yellow]○[/yellow]",
}


@dataclass
class Step:
    key: str
    label: str
    status: str = "pending"
    detail: str = ""


@dataclass
class StepTracker:
    """Ordered steps with a status each, rendered as a rich tree."""

    title: str
    steps: list[Step] = field(default_factory=list)

    def add(self, key: str, label: str) -> None:
        if all(step.key != key for step in self.steps):
            self.steps.append(Step(key, label))

    def update(self, key: str, status: str, detail: str = "") -> None:
        """Set a step's status; unknown keys are appended with the key as label."""
        for step in self.steps:
            if step.key == key:
                step.status = status
                if detail:
                    step.detail = detail
                return
        self.steps.append(Step(key, key, status, detail))

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{escape(self.title)}[/cyan]", guide_style="grey50")
        for step in self.steps:
            symbol = _SYMBOLS.get(step.status, " ")
            label = escape(step.label)
            detail = escape(step.detail.strip())
            if step.status == "pending":
                text = f"{label} ({detail})" if detail else label
                tree.add(f"{symbol} [bright_black]{text}[/bright_black]")
            elif detail:
                tree.add(f"{symbol} [white]{label}[/white] [bright_black]({detail})[/bright_black]")
            else:
                tree.add(f"{symbol} [white]{label}[/white]")
        return tree
