"""Frontmatter parsing and in-place status updates for PLAN.md / TASK.md.

The metadata block is a flat list of ``key: value`` lines between two ``---``
lines, scanned line by line rather than loaded as YAML. ``update_status``
leaves every byte outside the status value untouched.

Example document::

    ---
    issueNumber: 1
    title: "Add login form"
    status: draft
    ownerAgent: claude
    createdAt: 2026-01-01T00:00:00Z
    ---

    # Goal
    ...
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from aidd_cli.core.errors import FrontmatterError

__all__ = [
    "DELIMITER",
    "PlanFrontmatter",
    "TaskFrontmatter",
    "split_frontmatter",
    "parse_metadata",
    "parse_plan_frontmatter",
    "parse_task_frontmatter",
    "read_plan",
    "read_task",
    "update_status",
    "format_scalar",
]

DELIMITER = "---"

_PLAIN_SCALAR = re.compile(r"^[\w./:@+-]+$")


@dataclass(frozen=True)
class PlanFrontmatter:
    issue_number: int
    title: str
    status: str
    owner_agent: str
    created_at: str


@dataclass(frozen=True)
class TaskFrontmatter:
    issue_number: int
    task_number: int
    status: str
    branch_name: str
    worktree_path: str


# document key -> (attribute, type)
_PLAN_FIELDS: dict[str, tuple[str, type]] = {
    "issueNumber": ("issue_number", int),
    "title": ("title", str),
    "status": ("status", str),
    "ownerAgent": ("owner_agent", str),
    "createdAt": ("created_at", str),
}

_TASK_FIELDS: dict[str, tuple[str, type]] = {
    "issueNumber": ("issue_number", int),
    "taskNumber": ("task_number", int),
    "status": ("status", str),
    "branchName": ("branch_name", str),
    "worktreePath": ("worktree_path", str),
}

_RecordT = TypeVar("_RecordT", PlanFrontmatter, TaskFrontmatter)


def _split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping line endings so ``"".join`` is lossless."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r\n") == DELIMITER


def _locate_block(lines: list[str]) -> int | None:
    """Return the index of the closing delimiter line, or None."""
    if not lines or not _is_delimiter(lines[0]):
        return None
    for index in range(1, len(lines)):
        if _is_delimiter(lines[index]):
            return index
    return None


def split_frontmatter(content: str) -> tuple[str, str] | None:
    """Return ``(metadata, body)`` or None when the document has no frontmatter.

    The document must start with a ``---`` line and contain a second one; the
    metadata is the text in between and the body is everything after the
    closing line.
    """
    lines = _split_lines(content)
    closing = _locate_block(lines)
    if closing is None:
        return None
    return "".join(lines[1:closing]), "".join(lines[closing + 1 :])


def _unquote(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        inner = raw[1:-1]
        return re.sub(r'\\(["\\])', r"\1", inner)
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1].replace("''", "'")
    return raw


def parse_metadata(text: str, source: Path | None = None) -> dict[str, str]:
    """Parse flat ``key: value`` lines; blank lines and ``#`` comments are skipped."""
    values: dict[str, str] = {}
    for lineno, line in enumerate(_split_lines(text), start=2):
        line = line.rstrip("\r\n")
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, raw_value = stripped.partition(":")
        key = key.strip()
        if not sep or not key:
            raise FrontmatterError(f"line {lineno}: expected 'key: value', got {stripped!r}", source)
        values[key] = _unquote(raw_value.strip())
    return values


def _build(
    record_type: type[_RecordT],
    fields: dict[str, tuple[str, type]],
    content: str,
    label: str,
    source: Path | None,
) -> _RecordT:
    parts = split_frontmatter(content)
    if parts is None:
        raise FrontmatterError(f"No frontmatter found in {label}", source)
    metadata = parse_metadata(parts[0], source)

    kwargs: dict[str, Any] = {}
    for key, (attribute, kind) in fields.items():
        if key not in metadata:
            raise FrontmatterError(f"{label} frontmatter is missing required field '{key}'", source)
        raw = metadata[key]
        if kind is int:
            try:
                kwargs[attribute] = int(raw)
            except ValueError as exc:
                raise FrontmatterError(
                    f"{label} frontmatter field '{key}' must be an integer, got {raw!r}", source
                ) from exc
        else:
            kwargs[attribute] = raw
    return record_type(**kwargs)


def parse_plan_frontmatter(content: str, source: Path | None = None) -> PlanFrontmatter:
    return _build(PlanFrontmatter, _PLAN_FIELDS, content, "PLAN.md", source)


def parse_task_frontmatter(content: str, source: Path | None = None) -> TaskFrontmatter:
    return _build(TaskFrontmatter, _TASK_FIELDS, content, "TASK.md", source)


def _read(path: Path) -> str:
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except OSError as exc:
        raise FrontmatterError(f"Failed to read document: {exc.strerror or exc}", path) from exc
    except UnicodeDecodeError as exc:
        raise FrontmatterError(f"Document is not valid UTF-8: {exc.reason} at byte {exc.start}", path) from exc


def read_plan(path: Path) -> PlanFrontmatter:
    return parse_plan_frontmatter(_read(path), path)


def read_task(path: Path) -> TaskFrontmatter:
    return parse_task_frontmatter(_read(path), path)


def update_status(path: Path, new_status: str) -> None:
    """Rewrite the ``status:`` value of a document in place.

    Only the first ``status:`` line inside the metadata block changes; its line
    ending, all other metadata lines and the body are written back verbatim.
    """
    content = _read(path)
    lines = _split_lines(content)
    closing = _locate_block(lines)
    if closing is None:
        raise FrontmatterError("No frontmatter found", path)

    for index in range(1, closing):
        line = lines[index]
        if line.startswith("status:"):
            ending = line[len(line.rstrip("\r\n")) :]
            lines[index] = f"status: {format_scalar(new_status)}{ending}"
            break
    else:
        raise FrontmatterError("No status field in frontmatter", path)

    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write("".join(lines))
    except OSError as exc:
        raise FrontmatterError(f"Failed to write document: {exc.strerror or exc}", path) from exc


def format_scalar(value: str | int, *, quote: bool = False) -> str:
    """Render a value for a frontmatter line so ``parse_metadata`` reads it back unchanged."""
    if isinstance(value, int):
        return str(value)
    if not quote and _PLAIN_SCALAR.match(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
