"""CLI command modules for aidd.

Each module exposes either a typer sub-app (``app``) or a plain command
function that the root app registers.
"""

from . import deploy, issue, pr, status, task, wt

__all__ = ["deploy", "issue", "pr", "status", "task", "wt"]
