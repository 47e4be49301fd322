"""Configuration types for file listing."""

from __future__ import annotations

from dataclasses import dataclass, field

from pcrefind.file_lister.defaults import DEFAULT_EXCLUDES


@dataclass
class FileListerConfig:
    """
    Configuration for listing the files under a scan root.

    `tool_name` determines the ignore file name (e.g., `.pcrefindignore`).
    `exclude=None` means use `DEFAULT_EXCLUDES`; providing a list replaces them entirely.
    `files_max_size=0` disables the size limit.
    """

    tool_name: str = "pcrefind"
    exclude: list[str] | None = None
    extend_exclude: list[str] = field(default_factory=list)
    respect_gitignore: bool = True
    recursive: bool = True
    include_hidden: bool = True
    files_max_size: int = 0

    @property
    def effective_exclude(self) -> list[str]:
        """Combined exclude patterns: defaults (or `exclude`) + `extend_exclude`."""
        base = self.exclude if self.exclude is not None else list(DEFAULT_EXCLUDES)
        return base + self.extend_exclude
