"""
Self-contained directory listing with gitignore-aware pruning and configurable
exclusion patterns.

No imports from `pcrefind` outside this package.

Usage::

    from pcrefind.file_lister import FileLister, FileListerConfig

    lister = FileLister(FileListerConfig(extend_exclude=["incoming/"]))
    paths = lister.list_files("/video")
"""

from pcrefind.file_lister.defaults import DEFAULT_EXCLUDES
from pcrefind.file_lister.lister import FileLister
from pcrefind.file_lister.types import FileListerConfig

__all__ = [
    "DEFAULT_EXCLUDES",
    "FileLister",
    "FileListerConfig",
]
