"""
Translation of PCRE pattern syntax into Python `re` syntax.

Patterns handed to `pcrefind` are written in the PCRE2 dialect, compiled in UTF mode
with Unicode properties locked out of the shorthand classes. Python's `re` already
understands most of that dialect, so translation is a single left-to-right pass that
only rewrites the constructs where the two differ:

- `\\d`, `\\w`, `\\s`, `\\b` (and negations) stay ASCII-only, so they are wrapped in a
  scoped `(?a:...)` group.
- A character class that mixes ordinary members with shorthands, POSIX classes such
  as `[:alpha:]` or `[:^digit:]`, or `\\p{..}` properties is split into an alternation
  (a lookahead when negated). Ordinary members keep Unicode case folding while each
  special member keeps its own semantics.
- `\\p{..}` and `\\P{..}` general category properties become explicit code point
  ranges built from `unicodedata`. They are not affected by caseless matching.
- Option settings such as `(?s)` or `(?-i)` in the middle of a pattern become scoped
  `(?s:...)` groups running to the end of the enclosing group.
- `(?<name>...)` and `(?'name'...)` become `(?P<name>...)`. Repeated group names are
  allowed: later duplicates get a unique internal name, and a named back reference
  (`\\k<name>`, `\\k'name'`, `\\k{name}`, `\\g{name}`, `(?P=name)`) matches whichever
  group of that name was set first.
- `\\Q...\\E` quotes a literal run, `\\x{...}` is a code point escape, `\\z` is the
  absolute end and `\\Z` the end or before a final newline.
- A leading `(*UTF)` is accepted and dropped; `(*UCP)` and `\\C` are rejected.

Anything the translator does not recognize is copied through unchanged so that `re`
reports it with its own message.
"""

from __future__ import annotations

import re
import sys
import unicodedata
from functools import lru_cache

# Shorthand escapes that must keep ASCII-only semantics.
SHORTHAND_ESCAPES = frozenset("dDwWsSbB")

# Inside a class `\b` is a backspace, not a word boundary.
_CLASS_SHORTHAND_ESCAPES = frozenset("dDwWsS")

_POSIX_CLASSES: dict[str, str] = {
    "alnum": "a-zA-Z0-9",
    "alpha": "a-zA-Z",
    "ascii": r"\x00-\x7f",
    "blank": r" \t",
    "cntrl": r"\x00-\x1f\x7f",
    "digit": "0-9",
    "graph": "!-~",
    "lower": "a-z",
    "print": " -~",
    "punct": r"!-/:-@\[-`{-~",
    "space": r" \t\n\r\f\v",
    "upper": "A-Z",
    "word": r"\w",
    "xdigit": "0-9A-Fa-f",
}

# Start-of-pattern verbs that are redundant in UTF mode.
_UTF_VERBS = frozenset({"UTF", "UTF8"})

# Option letters `re` can scope. `J` (duplicate names) is always on here.
_SCOPED_OPTIONS = frozenset("imsx")
_ALWAYS_ON_OPTIONS = frozenset("J")

_DUPLICATE_NAME_SUFFIX = "__dup"

_GROUP_NAME_RE = re.compile(r"[^\W\d]\w*")
_POSIX_CLASS_RE = re.compile(r"\[:(\^?)([^:\]\\]*):\]")
_HEX_ESCAPE_RE = re.compile(r"\\x\{([0-9A-Fa-f]+)\}")
_NUMERIC_REF_RE = re.compile(r"\\g(?:\{([0-9]+)\}|([0-9]+))")
_OPTION_SETTING_RE = re.compile(r"\(\?(\^)?([a-zA-Z]*)(?:-([a-zA-Z]*))?([:)])")
_PYTHON_REF_RE = re.compile(r"\(\?P=([^\W\d]\w*)\)")

_NAMED_GROUP_OPENERS = {"(?P<": ">", "(?<": ">", "(?'": "'"}
_NAMED_REF_OPENERS = {"\\k<": ">", "\\k'": "'", "\\k{": "}", "\\g{": "}"}

_Range = tuple[int, int]

_GENERAL_CATEGORIES = (
    "Cc", "Cf", "Cn", "Co", "Cs",
    "Ll", "Lm", "Lo", "Lt", "Lu",
    "Mc", "Me", "Mn",
    "Nd", "Nl", "No",
    "Pc", "Pd", "Pe", "Pf", "Pi", "Po", "Ps",
    "Sc", "Sk", "Sm", "So",
    "Zl", "Zp", "Zs",
)  # fmt: skip

# Property names that combine categories (by prefix) with literal ranges.
_PROPERTY_ALIASES: dict[str, tuple[str | _Range, ...]] = {
    "l&": ("Lu", "Ll", "Lt"),
    "lc": ("Lu", "Ll", "Lt"),
    "xan": ("L", "N"),
    "xwd": ("L", "N", (0x5F, 0x5F)),
    "xsp": ("Z", (0x09, 0x0D)),
    "xps": ("Z", (0x09, 0x0D)),
}


@lru_cache(maxsize=1)
def _category_ranges() -> dict[str, list[_Range]]:
    """Code point ranges of every Unicode general category, in one pass."""
    ranges: dict[str, list[_Range]] = {}
    start = 0
    current = unicodedata.category(chr(0))
    for code_point in range(1, sys.maxunicode + 1):
        category = unicodedata.category(chr(code_point))
        if category != current:
            ranges.setdefault(current, []).append((start, code_point - 1))
            start, current = code_point, category
    ranges.setdefault(current, []).append((start, sys.maxunicode))
    return ranges


def _coalesce(ranges: list[_Range]) -> tuple[_Range, ...]:
    merged: list[_Range] = []
    for lo, hi in sorted(ranges):
        if merged and lo <= merged[-1][1] + 1:
            merged[-1] = (merged[-1][0], max(hi, merged[-1][1]))
        else:
            merged.append((lo, hi))
    return tuple(merged)


def _expand_property_part(part: str | _Range) -> list[_Range]:
    if isinstance(part, tuple):
        return [part]
    by_category = _category_ranges()
    return [
        code_range
        for category in _GENERAL_CATEGORIES
        if category.startswith(part)
        for code_range in by_category.get(category, [])
    ]


@lru_cache(maxsize=None)
def _property_ranges(name: str) -> tuple[_Range, ...] | None:
    """
    Resolve a `\\p{..}` name to code point ranges, or `None` if it is unknown.

    Names match loosely: case, spaces, hyphens and underscores are ignored. General
    categories (`Lu`, `Nd`), their one-letter groups (`L`, `N`), `L&`, `Any` and the
    `Xan`, `Xwd`, `Xsp`, `Xps` specials are supported. Script names are not.
    """
    key = re.sub(r"[\s_-]", "", name).lower()
    if key == "any":
        return ((0, sys.maxunicode),)

    parts: tuple[str | _Range, ...] | None = _PROPERTY_ALIASES.get(key)
    if parts is None:
        matching = [cat for cat in _GENERAL_CATEGORIES if cat.lower() == key]
        if matching:
            parts = tuple(matching)
        elif len(key) == 1 and any(cat.lower().startswith(key) for cat in _GENERAL_CATEGORIES):
            parts = (key.upper(),)
        else:
            return None

    ranges: list[_Range] = []
    for part in parts:
        ranges.extend(_expand_property_part(part))
    return _coalesce(ranges)


def _code_point_escape(code_point: int) -> str:
    if code_point < 0x100:
        return f"\\x{code_point:02x}"
    if code_point < 0x10000:
        return f"\\u{code_point:04x}"
    return f"\\U{code_point:08x}"


def _render_ranges(ranges: tuple[_Range, ...]) -> str:
    return "".join(
        _code_point_escape(lo) if lo == hi else f"{_code_point_escape(lo)}-{_code_point_escape(hi)}"
        for lo, hi in ranges
    )


def _class_atom(members: list[str], specials: list[str], negated: bool) -> str:
    """
    Assemble a translated character class.

    `members` are ordinary class members, kept in one bracket. `specials` are complete
    single-character atoms that cannot share that bracket.
    """
    body = "".join(members)
    if not specials:
        return f"[^{body}]" if negated else f"[{body}]"

    if body.startswith("^"):
        body = "\\" + body
    atoms = [f"[{body}]", *specials] if body else specials
    either = atoms[0] if len(atoms) == 1 else f"(?:{'|'.join(atoms)})"
    if negated:
        return f"(?:(?!{either})(?s:.))"
    return either


class _Translator:
    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self.pos = 0
        self.out: list[str] = []
        # Number of times each group name has been defined so far.
        self.group_names: dict[str, int] = {}
        # One entry per open group: the scoped option groups opened inside it.
        self.scopes: list[list[str]] = [[]]

    def translate(self) -> str:
        self._skip_start_verbs()
        pattern = self.pattern
        while self.pos < len(pattern):
            char = pattern[self.pos]
            if char == "\\":
                self._escape()
            elif char == "[":
                self._char_class()
            elif char == "(":
                self._group_open()
            elif char == ")":
                self._group_close()
            elif char == "|":
                self._alternation()
            else:
                self.out.append(char)
                self.pos += 1
        if len(self.scopes) == 1:
            self.out.append(")" * len(self.scopes[0]))
        return "".join(self.out)

    def _error(self, msg: str, pos: int) -> re.error:
        return re.error(msg, self.pattern, pos)

    def _skip_start_verbs(self) -> None:
        while self.pattern.startswith("(*", self.pos):
            end = self.pattern.find(")", self.pos)
            if end == -1:
                return
            verb = self.pattern[self.pos + 2 : end]
            if verb == "UCP":
                raise self._error("using UCP is disabled by the application", self.pos)
            if verb not in _UTF_VERBS:
                return
            self.pos = end + 1

    def _escape(self) -> None:
        pattern = self.pattern
        start = self.pos
        if start + 1 >= len(pattern):
            # Trailing backslash: leave it for `re` to report.
            self.out.append("\\")
            self.pos += 1
            return

        nxt = pattern[start + 1]
        if nxt == "C":
            raise self._error(r"using \C is disabled by the application", start)
        if nxt in SHORTHAND_ESCAPES:
            self.out.append(f"(?a:\\{nxt})")
            self.pos += 2
        elif nxt in "pP":
            atom, self.pos = self._property(start)
            self.out.append(atom)
        elif nxt == "Q":
            self.out.append(self._quoted_literal())
        elif nxt == "E":
            # A stray \E is ignored.
            self.pos += 2
        elif nxt == "z":
            self.out.append(r"\Z")
            self.pos += 2
        elif nxt == "Z":
            self.out.append(r"(?=\n?\Z)")
            self.pos += 2
        elif nxt == "x" and pattern.startswith("{", start + 2):
            self.out.append(self._hex_escape())
        elif nxt in "kg" and self._named_reference():
            pass
        elif nxt == "g" and self._numeric_reference():
            pass
        else:
            self.out.append(pattern[start : start + 2])
            self.pos += 2

    def _quoted_literal(self) -> str:
        """Consume `\\Q...\\E` (or `\\Q...` to end of pattern) and return it escaped."""
        body_start = self.pos + 2
        end = self.pattern.find("\\E", body_start)
        if end == -1:
            literal = self.pattern[body_start:]
            self.pos = len(self.pattern)
        else:
            literal = self.pattern[body_start:end]
            self.pos = end + 2
        return re.escape(literal)

    def _hex_escape(self) -> str:
        m = _HEX_ESCAPE_RE.match(self.pattern, self.pos)
        if m is None:
            # Malformed: copy `\x` and let `re` complain about the rest.
            self.pos += 2
            return "\\x"
        code_point = int(m.group(1), 16)
        if code_point > 0x10FFFF:
            raise self._error(
                "character code point value in \\x{} or \\o{} is too large", self.pos
            )
        if 0xD800 <= code_point <= 0xDFFF:
            raise self._error(
                "disallowed Unicode code point (>= 0xd800 && <= 0xdfff)", self.pos
            )
        self.pos = m.end()
        return f"\\U{code_point:08X}"

    def _property(self, start: int) -> tuple[str, int]:
        """Translate `\\p{name}`, `\\P{name}`, `\\p{^name}` or `\\pL` at `start`."""
        pattern = self.pattern
        negated = pattern[start + 1] == "P"
        if pattern.startswith("{", start + 2):
            close = pattern.find("}", start + 3)
            if close == -1:
                raise self._error("malformed \\P or \\p sequence", start)
            name = pattern[start + 3 : close]
            end = close + 1
            if name.startswith("^"):
                negated = not negated
                name = name[1:]
        elif start + 2 < len(pattern):
            name = pattern[start + 2]
            end = start + 3
        else:
            raise self._error("malformed \\P or \\p sequence", start)

        ranges = _property_ranges(name)
        if ranges is None:
            raise self._error("unknown property after \\P or \\p", start)
        caret = "^" if negated else ""
        return f"(?-i:[{caret}{_render_ranges(ranges)}])", end

    def _backreference(self, name: str) -> str:
        count = self.group_names.get(name, 0)
        names = [name] + [f"{name}{_DUPLICATE_NAME_SUFFIX}{k}" for k in range(1, count)]
        ref = f"(?P={names[-1]})"
        for alias in reversed(names[:-1]):
            ref = f"(?({alias})(?P={alias})|{ref})"
        return ref

    def _named_reference(self) -> bool:
        for opener, closer in _NAMED_REF_OPENERS.items():
            if self.pattern.startswith(opener, self.pos):
                name_start = self.pos + len(opener)
                m = _GROUP_NAME_RE.match(self.pattern, name_start)
                if m is None or not self.pattern.startswith(closer, m.end()):
                    return False
                self.out.append(self._backreference(m.group()))
                self.pos = m.end() + len(closer)
                return True
        return False

    def _numeric_reference(self) -> bool:
        m = _NUMERIC_REF_RE.match(self.pattern, self.pos)
        if m is None:
            return False
        # Grouped so that a following digit is not read as part of the number.
        self.out.append(f"(?:\\{m.group(1) or m.group(2)})")
        self.pos = m.end()
        return True

    def _group_open(self) -> None:
        pattern = self.pattern
        start = self.pos

        if pattern.startswith("(?#", start):
            end = pattern.find(")", start)
            end = len(pattern) if end == -1 else end + 1
            self.out.append(pattern[start:end])
            self.pos = end
            return

        m = _PYTHON_REF_RE.match(pattern, start)
        if m is not None:
            self.out.append(self._backreference(m.group(1)))
            self.pos = m.end()
            return

        for opener, closer in _NAMED_GROUP_OPENERS.items():
            if not pattern.startswith(opener, start):
                continue
            name_start = start + len(opener)
            m = _GROUP_NAME_RE.match(pattern, name_start)
            if m is None or not pattern.startswith(closer, m.end()):
                # Lookbehind `(?<=`, `(?<!`, or a malformed name.
                break
            self.out.append(f"(?P<{self._register_group_name(m.group())}>")
            self.pos = m.end() + len(closer)
            self.scopes.append([])
            return

        m = _OPTION_SETTING_RE.match(pattern, start)
        if m is not None and self._option_setting(m):
            return

        self.out.append("(")
        self.pos += 1
        self.scopes.append([])

    def _option_setting(self, m: re.Match[str]) -> bool:
        """
        Translate `(?flags)` or `(?flags:`. Returns False when `m` is not an option
        setting `re` can scope, leaving it to be copied through.
        """
        caret, on_letters, off_letters, terminator = m.groups()
        if not caret and not on_letters and off_letters is None:
            # Plain `(?:` or `(?)`.
            return False
        on = set(on_letters) - _ALWAYS_ON_OPTIONS
        off = set(off_letters or "") - _ALWAYS_ON_OPTIONS
        if not (on | off) <= _SCOPED_OPTIONS:
            return False
        if caret:
            off |= _SCOPED_OPTIONS - on
        on -= off

        opener = "(?" + "".join(sorted(on))
        if off:
            opener += "-" + "".join(sorted(off))
        opener += ":"

        self.pos = m.end()
        if terminator == ":":
            self.out.append(opener)
            self.scopes.append([])
        elif on or off:
            # The setting lasts until the enclosing group closes.
            self.out.append(opener)
            self.scopes[-1].append(opener)
        return True

    def _group_close(self) -> None:
        if len(self.scopes) > 1:
            self.out.append(")" * len(self.scopes.pop()))
        self.out.append(")")
        self.pos += 1

    def _alternation(self) -> None:
        # Option settings carry on into the following branches of the same group.
        openers = self.scopes[-1]
        self.out.append(")" * len(openers) + "|" + "".join(openers))
        self.pos += 1

    def _register_group_name(self, name: str) -> str:
        count = self.group_names.get(name, 0)
        self.group_names[name] = count + 1
        if count == 0:
            return name
        return f"{name}{_DUPLICATE_NAME_SUFFIX}{count}"

    def _posix_class(self, m: re.Match[str]) -> str:
        ranges = _POSIX_CLASSES.get(m.group(2))
        if ranges is None:
            raise self._error("unknown POSIX class name", m.start())
        caret = "^" if m.group(1) else ""
        return f"(?a:[{caret}{ranges}])"

    def _char_class(self) -> None:
        pattern = self.pattern
        n = len(pattern)
        start = self.pos
        if _POSIX_CLASS_RE.match(pattern, start):
            raise self._error("POSIX named classes are supported only within a class", start)

        i = start + 1
        negated = i < n and pattern[i] == "^"
        if negated:
            i += 1
        members: list[str] = []
        specials: list[str] = []
        if i < n and pattern[i] == "]":
            # A leading `]` is literal.
            members.append("\\]")
            i += 1

        while i < n and pattern[i] != "]":
            char = pattern[i]
            if char == "\\" and i + 1 < n:
                nxt = pattern[i + 1]
                if nxt in _CLASS_SHORTHAND_ESCAPES:
                    specials.append(f"(?a:\\{nxt})")
                    i += 2
                elif nxt in "pP":
                    atom, i = self._property(i)
                    specials.append(atom)
                elif nxt == "Q":
                    self.pos = i
                    members.append(self._quoted_literal())
                    i = self.pos
                elif nxt == "E":
                    i += 2
                elif nxt == "x" and pattern.startswith("{", i + 2):
                    self.pos = i
                    members.append(self._hex_escape())
                    i = self.pos
                else:
                    members.append(pattern[i : i + 2])
                    i += 2
            elif char == "[":
                m = _POSIX_CLASS_RE.match(pattern, i)
                if m is not None:
                    specials.append(self._posix_class(m))
                    i = m.end()
                else:
                    members.append("\\[")
                    i += 1
            else:
                members.append(char)
                i += 1

        if i >= n:
            # Unterminated class: copy the rest verbatim so `re` reports it.
            self.out.append(pattern[start:])
            self.pos = n
            return

        self.out.append(_class_atom(members, specials, negated))
        self.pos = i + 1


def translate_pattern(pattern: str) -> str:
    """
    Rewrite a PCRE2-style pattern into an equivalent Python `re` pattern.

    Raises `re.error` for constructs that are locked out (`\\C`, `(*UCP)`), unknown
    POSIX class or property names, and out of range code points. Errors in constructs
    copied through are left for `re.compile()`.
    """
    return _Translator(pattern).translate()
