"""
Default exclude patterns for file listing.

These patterns use gitignore syntax. Directory patterns end with `/`.
"""

from __future__ import annotations

# Version control metadata; never worth listing.
# Applied during directory traversal (prune, don't enter).
DEFAULT_EXCLUDES: list[str] = [
    ".git/",
    ".hg/",
    ".svn/",
    ".bzr/",
    "_darcs/",
]
