"""Tests for PatternMatcher."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from pcrefind.matcher import PatternMatcher


def test_matches_anywhere_in_subject():
    matcher = PatternMatcher(r"mp4")
    assert matcher.matches("/video/a.mp4")
    assert matcher.matches("mp4/a.mkv")
    assert not matcher.matches("/video/a.mkv")


def test_anchors_still_apply():
    matcher = PatternMatcher(r".*\.mp4$")
    assert matcher.matches("a.mp4")
    assert not matcher.matches("a.mp4.part")


def test_case_insensitive_ascii():
    matcher = PatternMatcher("TRAILER")
    assert matcher.matches("/video/movie-trailer.mkv")


def test_case_insensitive_unicode():
    matcher = PatternMatcher("émilie")
    assert matcher.matches("/video/ÉMILIE.mp4")


def test_unicode_literal_and_dot():
    assert PatternMatcher("日本").matches("/video/日本語.mkv")
    # `.` consumes one code point, not one byte.
    assert PatternMatcher(r"^.$").matches("é")
    assert PatternMatcher(r"^.$").matches("日")


def test_digit_shorthand_is_ascii_only():
    matcher = PatternMatcher(r"^\d+$")
    assert matcher.matches("123")
    assert not matcher.matches("١٢٣")


def test_word_shorthand_is_ascii_only():
    matcher = PatternMatcher(r"^\w+$")
    assert matcher.matches("cafe_1")
    assert not matcher.matches("café")


def test_empty_subject():
    assert PatternMatcher("").matches("")
    assert not PatternMatcher("a").matches("")


@pytest.mark.parametrize("pattern", ["(", "[", "a{2,1}", "*a", r"\h"])
def test_invalid_pattern_is_unready(pattern: str):
    matcher = PatternMatcher(pattern)
    assert not matcher.ready
    assert matcher.error_message != ""
    for subject in ["", "(", "[", "anything at all"]:
        assert not matcher.matches(subject)


def test_invalid_pattern_offset():
    matcher = PatternMatcher("abc(")
    assert matcher.error_offset == 3
    assert "at position" not in matcher.error_message


def test_valid_pattern_has_no_error_message():
    matcher = PatternMatcher("a")
    assert matcher.ready
    assert matcher.error_message == ""
    assert not matcher.matches("b")
    assert matcher.error_message == ""
    assert matcher.error_offset is None


def test_repeated_calls_do_not_leak_state():
    matcher = PatternMatcher(r"(a)(b)?c")
    subjects = ["ac", "xyz", "abc", "", "ABC", "xyz", "ac"]
    first = [matcher.matches(s) for s in subjects]
    second = [matcher.matches(s) for s in reversed(subjects)]
    assert first == list(reversed(second))
    assert first == [True, False, True, False, True, False, True]


def test_last_match_holds_captures():
    matcher = PatternMatcher(r"s(\d+)e(\d+)")
    assert matcher.matches("Show.S01E02.mkv")
    assert matcher.last_match is not None
    assert matcher.last_match.groups() == ("01", "02")
    assert not matcher.matches("Show.mkv")
    assert matcher.last_match is None


def test_invalid_utf8_bytes_is_a_match_error():
    matcher = PatternMatcher("a")
    assert not matcher.matches(b"a\xff")
    assert matcher.last_failed
    assert matcher.error_message.startswith("UTF-8 error:")
    assert "offset 1" in matcher.error_message

    # The next call succeeds, but the diagnostic is not cleared.
    assert matcher.matches("a")
    assert not matcher.last_failed
    assert matcher.error_message.startswith("UTF-8 error:")


def test_valid_utf8_bytes():
    matcher = PatternMatcher("CAFÉ")
    assert matcher.matches("café".encode())


def test_lone_surrogate_is_a_match_error():
    matcher = PatternMatcher(r"\.mp4$")
    assert not matcher.matches("bad\udcff.mp4")
    assert matcher.last_failed
    assert "UTF-8 error" in matcher.error_message


def test_duplicate_group_names_allowed():
    matcher = PatternMatcher(r"(?<year>\d{4})-x|x-(?<year>\d{4})")
    assert matcher.ready, matcher.error_message
    assert matcher.matches("x-1999")
    assert matcher.matches("2001-x")
    assert not matcher.matches("x-99")


def test_backslash_c_is_locked_out():
    matcher = PatternMatcher(r"a\C")
    assert not matcher.ready
    assert "disabled by the application" in matcher.error_message
    assert matcher.error_offset == 1


def test_ucp_is_locked_out():
    matcher = PatternMatcher(r"(*UCP)\w")
    assert not matcher.ready
    assert matcher.error_message == "using UCP is disabled by the application"
    assert matcher.error_offset == 0


def test_close_is_idempotent():
    matcher = PatternMatcher("a")
    matcher.close()
    assert not matcher.ready
    assert not matcher.matches("a")
    matcher.close()


def test_close_on_unready_matcher():
    matcher = PatternMatcher("(")
    matcher.close()
    assert not matcher.ready


def test_context_manager_closes():
    with PatternMatcher("a") as matcher:
        assert matcher.matches("cat")
    assert not matcher.ready


def test_shared_across_threads():
    matcher = PatternMatcher(r"^[a-m].*\.mp4$")
    subjects = [f"{chr(ord('a') + i % 26)}{i}.mp4" for i in range(500)]
    expected = [s[0] <= "m" for s in subjects]
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(matcher.matches, subjects))
    assert results == expected


def test_repr():
    assert repr(PatternMatcher("a")) == "PatternMatcher('a', ready)"
    assert repr(PatternMatcher("(")) == "PatternMatcher('(', unready)"


def test_negated_posix_class():
    matcher = PatternMatcher(r"^[[:^digit:]]+$")
    assert matcher.ready, matcher.error_message
    assert matcher.matches("abc")
    assert not matcher.matches("abc1")


def test_unknown_posix_class_is_unready():
    matcher = PatternMatcher("[[:foo:]]")
    assert not matcher.ready
    assert matcher.error_message == "unknown POSIX class name"
    assert matcher.error_offset == 1


def test_duplicate_name_back_reference_uses_the_group_that_matched():
    matcher = PatternMatcher(r"(?:(?<n>a)|(?<n>b))\k<n>")
    assert matcher.ready, matcher.error_message
    assert matcher.matches("bb")
    assert matcher.matches("AA")
    assert not matcher.matches("ab")


def test_class_with_shorthand_folds_unicode_case():
    matcher = PatternMatcher(r"[é\d]")
    assert matcher.matches("É")
    assert matcher.matches("7")
    assert not matcher.matches("e")


@pytest.mark.parametrize(
    ("pattern", "subject", "expected"),
    [
        (r"a(?s).b", "a\nb", True),
        (r"x(?-i)Y", "XY", True),
        (r"x(?-i)Y", "Xy", False),
        (r"^\p{L}+$", "Émilie", True),
        (r"^\p{L}+$", "2001", False),
        (r"^\P{Lu}+$", "abc", True),
        (r"^\P{Lu}+$", "aBc", False),
    ],
)
def test_option_settings_and_properties(pattern: str, subject: str, expected: bool):
    matcher = PatternMatcher(pattern)
    assert matcher.ready, matcher.error_message
    assert matcher.matches(subject) is expected
