"""
FileLister: the directory-listing collaborator.

Lists the files under a scan root as plain path strings, applying the configured
exclusions. The result is unordered; callers sort it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

import pathspec

from pcrefind.file_lister.gitignore import load_gitignore, load_tool_ignore
from pcrefind.file_lister.types import FileListerConfig

log = logging.getLogger(__name__)


class FileLister:
    """
    Walks a scan root and yields its files, pruning excluded directories, and
    respecting gitignore files and the tool-specific ignore file.
    """

    def __init__(self, config: FileListerConfig | None = None) -> None:
        self._config: FileListerConfig = config if config is not None else FileListerConfig()
        self._exclude_spec: pathspec.PathSpec = pathspec.PathSpec.from_lines(
            "gitignore", self._config.effective_exclude
        )
        # Cache gitignore specs per directory to avoid re-reading from disk.
        self._gitignore_cache: dict[Path, pathspec.PathSpec | None] = {}

    def list_files(self, root: str | os.PathLike[str]) -> list[str]:
        """
        List the files under `root` as path strings joined onto `root` as given.

        Raises `FileNotFoundError` if `root` does not exist and `NotADirectoryError`
        if it is not a directory.
        """
        root_path = Path(root)
        if not root_path.exists():
            raise FileNotFoundError(f"Scan root not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Scan root is not a directory: {root}")

        result = list(self._walk_directory(os.fspath(root)))
        log.debug("Listed %d files under %s", len(result), root)
        return result

    def _walk_directory(self, root: str) -> Iterable[str]:
        """
        Walk a directory tree using `os.walk()`, pruning excluded directories
        in-place.
        """
        root_path = Path(root)
        tool_ignore = load_tool_ignore(self._config.tool_name, root_path)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
            current = Path(dirpath)
            rel_to_root = current.relative_to(root_path)

            if self._config.recursive:
                # Prune excluded directories in-place (prevents descent)
                dirnames[:] = [
                    d
                    for d in dirnames
                    if not self._is_dir_excluded(
                        d, rel_to_root / d, current, tool_ignore, root_path
                    )
                ]
            else:
                dirnames[:] = []

            gitignore_specs: list[pathspec.PathSpec] = []
            if self._config.respect_gitignore:
                gitignore_specs = self._get_gitignore_chain(current, root_path)

            for filename in filenames:
                if not self._config.include_hidden and filename.startswith("."):
                    continue
                if any(spec.match_file(filename) for spec in gitignore_specs):
                    continue
                if tool_ignore and tool_ignore.match_file((rel_to_root / filename).as_posix()):
                    continue
                if self._exclude_spec.match_file(filename):
                    continue
                filepath = os.path.join(dirpath, filename)
                if self._exceeds_max_size(filepath):
                    continue
                yield filepath

    def _is_dir_excluded(
        self,
        dirname: str,
        rel_path: Path,
        current_dir: Path,
        tool_ignore: pathspec.PathSpec | None,
        walk_root: Path,
    ) -> bool:
        """Check if a directory should be pruned during traversal."""
        if not self._config.include_hidden and dirname.startswith("."):
            return True

        dir_with_slash = dirname + "/"
        rel_with_slash = rel_path.as_posix() + "/"

        if self._exclude_spec.match_file(dir_with_slash):
            return True
        if self._exclude_spec.match_file(rel_with_slash):
            return True

        if self._config.respect_gitignore:
            for spec in self._get_gitignore_chain(current_dir, walk_root):
                if spec.match_file(dir_with_slash):
                    return True

        if tool_ignore and tool_ignore.match_file(dir_with_slash):
            return True
        if tool_ignore and tool_ignore.match_file(rel_with_slash):
            return True

        return False

    def _exceeds_max_size(self, path: str) -> bool:
        """Check if a file exceeds the configured max size. 0 = no limit."""
        if self._config.files_max_size == 0:
            return False
        try:
            return os.stat(path).st_size > self._config.files_max_size
        except OSError:
            return False

    def _get_gitignore(self, directory: Path) -> pathspec.PathSpec | None:
        """Load and cache gitignore for a directory."""
        if directory not in self._gitignore_cache:
            self._gitignore_cache[directory] = load_gitignore(directory)
        return self._gitignore_cache[directory]

    def _get_gitignore_chain(self, directory: Path, walk_root: Path) -> list[pathspec.PathSpec]:
        """Collect all gitignore specs from walk_root down to directory (inclusive)."""
        specs: list[pathspec.PathSpec] = []
        resolved_root = walk_root.resolve()
        resolved_dir = directory.resolve()
        current = resolved_root
        while True:
            spec = self._get_gitignore(current)
            if spec is not None:
                specs.append(spec)
            if current == resolved_dir:
                break
            try:
                next_part = resolved_dir.relative_to(current).parts[0]
            except (ValueError, IndexError):
                break
            current = current / next_part
        return specs


def _log_walk_error(error: OSError) -> None:
    log.warning("Skipping unreadable directory: %s", error)
