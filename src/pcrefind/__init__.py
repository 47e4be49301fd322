from pcrefind.finder import FileSource, find_matching
from pcrefind.matcher import PatternMatcher
from pcrefind.pcre_dialect import translate_pattern

__all__ = [
    "FileSource",
    "PatternMatcher",
    "find_matching",
    "translate_pattern",
]
