"""Error types raised by aidd operations.

Every fatal condition is an ``AiddError``; the CLI layer turns it into an
``ERROR:`` line on stderr and exit code 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

__all__ = [
    "AiddError",
    "UserInputError",
    "ConfigError",
    "FrontmatterError",
    "CommandNotFoundError",
    "CommandFailedError",
    "format_error",
]


class AiddError(RuntimeError):
    """Raised when an aidd command cannot be completed."""


class UserInputError(AiddError):
    """Raised for problems the user can fix (missing documents, bad issue bodies)."""


class ConfigError(AiddError):
    """Raised when .aidd/config.yaml cannot be parsed or validated."""


class FrontmatterError(AiddError):
    """Raised when a document's frontmatter is missing or malformed."""

    def __init__(self, message: str, source: Path | None = None):
        self.source = source
        if source is not None:
            message = f"{source}: {message}"
        super().__init__(message)


class CommandNotFoundError(AiddError):
    """Raised when an external program cannot be launched."""

    def __init__(self, program: str):
        self.program = program
        super().__init__(f"Failed to execute '{program}'. Is it installed?")


class CommandFailedError(AiddError):
    """Raised when an external program exits with a non-zero status."""

    def __init__(
        self,
        program: str,
        args: Sequence[str],
        returncode: int,
        stderr: str | None = None,
    ):
        self.program = program
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        command_line = " ".join([program, *self.args_list])
        message = f"Command '{command_line}' failed (exit {returncode})"
        if stderr is not None:
            message += f":\n{stderr}"
        super().__init__(message)


def format_error(exc: BaseException) -> str:
    """Render an exception and its ``__cause__`` chain for display."""
    lines = [str(exc) or exc.__class__.__name__]
    cause = exc.__cause__
    while cause is not None:
        lines.append(f"  Caused by: {cause}")
        cause = cause.__cause__
    return "\n".join(lines)
