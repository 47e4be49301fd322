"""Gitignore and tool-specific ignore file handling using pathspec."""

from __future__ import annotations

import logging
from pathlib import Path

import pathspec

log = logging.getLogger(__name__)


def _read_ignore_file(path: Path) -> pathspec.PathSpec | None:
    """
    Compile an ignore file into a `PathSpec`. Returns `None` if the file is missing,
    unreadable, not UTF-8, or has no patterns.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        if path.exists():
            log.warning("Ignoring unreadable ignore file %s: %s", path, e)
        return None
    lines = text.splitlines()
    lines = [line for line in lines if line.strip() and not line.strip().startswith("#")]
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitignore", lines)


def load_gitignore(directory: Path) -> pathspec.PathSpec | None:
    """Read `.gitignore` in the given directory, or `None` if absent or empty."""
    return _read_ignore_file(directory / ".gitignore")


def load_tool_ignore(tool_name: str, start_dir: Path) -> pathspec.PathSpec | None:
    """
    Walk up from `start_dir` looking for `.{tool_name}ignore` (e.g., `.pcrefindignore`).
    Returns compiled `PathSpec` from first found, or `None`.
    """
    ignore_name = f".{tool_name}ignore"
    current = start_dir.resolve()
    while True:
        candidate = current / ignore_name
        if candidate.is_file():
            return _read_ignore_file(candidate)
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None
