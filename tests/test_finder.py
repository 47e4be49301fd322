"""Tests for the scan loop."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

import pytest

from pcrefind.finder import find_matching
from pcrefind.matcher import PatternMatcher


class _FakeSource:
    def __init__(self, paths: list[str]) -> None:
        self.paths = paths
        self.roots: list[str | os.PathLike[str]] = []

    def list_files(self, root: str | os.PathLike[str]) -> Iterable[str]:
        self.roots.append(root)
        return list(self.paths)


def test_matching_paths_in_sorted_order():
    source = _FakeSource(["b.mp4", "a.mp4", "c.txt"])
    result = list(find_matching(source, "/video", PatternMatcher(r".*\.mp4$")))
    assert result == ["a.mp4", "b.mp4"]
    assert source.roots == ["/video"]


def test_empty_listing():
    assert list(find_matching(_FakeSource([]), "/video", PatternMatcher("a"))) == []


def test_sort_is_plain_code_point_order():
    source = _FakeSource(["b.mp4", "B.mp4", "a.mp4", "é.mp4"])
    result = list(find_matching(source, "/video", PatternMatcher("mp4")))
    assert result == ["B.mp4", "a.mp4", "b.mp4", "é.mp4"]


def test_unready_matcher_yields_nothing():
    source = _FakeSource(["[", "a"])
    assert list(find_matching(source, "/video", PatternMatcher("["))) == []


def test_match_error_skips_path_and_continues(caplog: pytest.LogCaptureFixture):
    source = _FakeSource(["bad\udcff.mp4", "good.mp4"])
    with caplog.at_level(logging.WARNING, logger="pcrefind"):
        result = list(find_matching(source, "/video", PatternMatcher(r"\.mp4$")))
    assert result == ["good.mp4"]
    assert "Skipping" in caplog.text
    assert "UTF-8 error" in caplog.text


def test_no_match_is_not_logged(caplog: pytest.LogCaptureFixture):
    source = _FakeSource(["a.txt"])
    with caplog.at_level(logging.WARNING, logger="pcrefind"):
        assert list(find_matching(source, "/video", PatternMatcher(r"\.mp4$"))) == []
    assert caplog.text == ""
