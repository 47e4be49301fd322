"""Scan loop: list a root, sort the entries, keep the ones the pattern matches."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from typing import Protocol

from pcrefind.matcher import PatternMatcher

log = logging.getLogger(__name__)


class FileSource(Protocol):
    def list_files(self, root: str | os.PathLike[str]) -> Iterable[str]: ...


def find_matching(
    source: FileSource, root: str | os.PathLike[str], matcher: PatternMatcher
) -> Iterator[str]:
    """
    Yield the paths listed under `root` that `matcher` matches, in plain string sort
    order. A path that fails to match because of a match error is logged and skipped.
    """
    paths = sorted(source.list_files(root))
    for path in paths:
        if matcher.matches(path):
            yield path
        elif matcher.last_failed:
            log.warning("Skipping %r: %s", path, matcher.error_message)
