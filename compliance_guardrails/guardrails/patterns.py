"""
Pattern matchers shared by the prompt shield, PII detector and response analyzer.

Everything here is a pure function of its input. Compiled ``re.Pattern``
objects keep no match position between calls, so a single compiled table
can be used by any number of concurrent checks.
"""
import re
from typing import Iterable, List, Pattern, Sequence, Tuple

XSS_SCRIPT_PATTERN = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE)
HTML_TAG_PATTERN = re.compile(r"<[^>]+>")
EVENT_HANDLER_PATTERN = re.compile(r"(?:alert|onerror|onclick|onload)\s*\(", re.IGNORECASE)
ANGLE_BRACKET_PATTERN = re.compile(r"[<>]")
WHITESPACE_RUN = re.compile(r"\s+")


def factor_name(prefix: str, keyword: str) -> str:
    """``prefix`` + keyword with whitespace runs collapsed to underscores"""
    return prefix + "_" + WHITESPACE_RUN.sub("_", keyword)


def find_keywords(lowered_text: str, keywords: Iterable[str]) -> List[str]:
    """Keywords occurring as substrings of already lower-cased text, in table order"""
    return [keyword for keyword in keywords if keyword.lower() in lowered_text]


def contains_any(text: str, markers: Iterable[str]) -> bool:
    return any(marker in text for marker in markers)


def has_xss(text: str) -> bool:
    if XSS_SCRIPT_PATTERN.search(text):
        return True
    return bool(HTML_TAG_PATTERN.search(text)) and bool(EVENT_HANDLER_PATTERN.search(text))


def has_angle_brackets(text: str) -> bool:
    return bool(ANGLE_BRACKET_PATTERN.search(text))


def compile_table(table: Sequence[Tuple[str, str]], flags: int = 0) -> Tuple[Tuple[str, Pattern], ...]:
    """Compile a ``(name, pattern)`` table preserving order"""
    return tuple((name, re.compile(source, flags)) for name, source in table)


def compile_patterns(sources: Iterable[str], flags: int = 0) -> Tuple[Pattern, ...]:
    return tuple(re.compile(source, flags) for source in sources)
