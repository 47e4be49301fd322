"""
PatternMatcher: compile a pattern once, then test many subjects against it.

A pattern that fails to compile does not raise. The matcher is left permanently
unready, `matches()` returns `False` for every subject, and the diagnostic is kept in
`error_message`. Match-time failures (a subject that is not valid UTF-8) are reported
the same way, one subject at a time.
"""

from __future__ import annotations

import logging
import re
import threading
from types import TracebackType

from pcrefind.pcre_dialect import translate_pattern

log = logging.getLogger(__name__)

COMPILE_FLAGS = re.IGNORECASE | re.UNICODE
"""
Fixed compile options: caseless matching with Unicode case folding. ASCII-only
shorthand classes are handled by `translate_pattern()`, not by a flag.
"""


class PatternMatcher:
    """
    Compiled, case-insensitive, PCRE-style pattern with an unanchored `matches()`
    predicate.

    The compiled pattern is read-only once built. The per-instance state a match
    leaves behind (`last_match`, `last_failed`, `error_message`) is updated under a
    lock, so an instance can be shared between threads, but that state then reflects
    whichever call finished last.
    """

    def __init__(self, pattern: str) -> None:
        self._pattern: str = pattern
        self._compiled: re.Pattern[str] | None = None
        self._last_match: re.Match[str] | None = None
        self._last_failed: bool = False
        self._error_message: str = ""
        self._error_offset: int | None = None
        self._lock = threading.Lock()

        try:
            translated = translate_pattern(pattern)
        except re.error as e:
            self._set_compile_error(e.msg, e.pos)
            return

        try:
            self._compiled = re.compile(translated, COMPILE_FLAGS)
        except re.error as e:
            # Positions only line up with the caller's pattern if nothing was rewritten.
            self._set_compile_error(e.msg, e.pos if translated == pattern else None)
        except (OverflowError, RecursionError) as e:
            self._set_compile_error(f"pattern is too large or too complicated: {e}", None)
        else:
            log.debug("Compiled pattern %r as %r", pattern, translated)

    def _set_compile_error(self, msg: str, offset: int | None) -> None:
        self._error_message = msg
        self._error_offset = offset
        log.debug("Failed to compile pattern %r: %s (offset %s)", self._pattern, msg, offset)

    @property
    def pattern(self) -> str:
        """The pattern text as supplied."""
        return self._pattern

    @property
    def ready(self) -> bool:
        """True if the pattern compiled and the matcher has not been closed."""
        return self._compiled is not None

    @property
    def error_message(self) -> str:
        """
        Most recent diagnostic from a failed compile or a failed match, or `""` if
        nothing has failed yet. Reading it does not clear it.
        """
        return self._error_message

    @property
    def error_offset(self) -> int | None:
        """Offset into `pattern` of a compile error, when it is known."""
        return self._error_offset

    @property
    def last_match(self) -> re.Match[str] | None:
        """Match object from the most recent successful `matches()` call."""
        return self._last_match

    @property
    def last_failed(self) -> bool:
        """True if the most recent `matches()` call stopped on a match error."""
        return self._last_failed

    def matches(self, subject: str | bytes) -> bool:
        """
        Search `subject` for the pattern anywhere, starting at offset 0.

        `bytes` subjects are decoded as strict UTF-8. A `str` subject must be
        encodable as UTF-8, which rules out lone surrogates (how `os` represents
        undecodable file names). An invalid subject records an `error_message` and
        counts as no match.
        """
        compiled = self._compiled
        if compiled is None:
            return False

        try:
            text = _as_utf8_text(subject)
        except (UnicodeDecodeError, UnicodeEncodeError) as e:
            with self._lock:
                self._last_match = None
                self._last_failed = True
                self._error_message = f"UTF-8 error: {e.reason} at offset {e.start}"
            return False

        found = compiled.search(text)
        with self._lock:
            self._last_match = found
            self._last_failed = False
        return found is not None

    def close(self) -> None:
        """Release the compiled pattern and match state. Safe to call more than once."""
        with self._lock:
            self._compiled = None
            self._last_match = None

    def __enter__(self) -> PatternMatcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "ready" if self.ready else "unready"
        return f"PatternMatcher({self._pattern!r}, {state})"


def _as_utf8_text(subject: str | bytes) -> str:
    if isinstance(subject, bytes):
        return subject.decode("utf-8")
    subject.encode("utf-8")
    return subject
