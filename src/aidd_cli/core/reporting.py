"""Console output and logging setup shared by all commands."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

console = Console(soft_wrap=True, highlight=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False)


def info(message: str) -> None:
    err_console.print(f"[cyan]INFO:[/cyan] {escape(message)}")


def warn(message: str) -> None:
    err_console.print(f"[yellow]WARN:[/yellow] {escape(message)}")


def error(message: str) -> None:
    err_console.print(f"[red]ERROR:[/red] {escape(message)}")


def emit(text: str) -> None:
    """Print a result line on stdout without markup interpretation."""
    console.print(text, markup=False)


def configure_logging(verbose: bool = False) -> None:
    """Attach a rich handler to the package logger.

    ``--verbose`` lowers the level to DEBUG so every external command shows up.
    """
    logger = logging.getLogger("aidd_cli")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(console=err_console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
