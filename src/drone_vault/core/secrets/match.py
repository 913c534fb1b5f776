"""Case-insensitive glob matching and key lookup.

Patterns follow filesystem glob rules: ``*`` and ``?`` never cross a
``/``, ``[...]`` is a character class (``[^...]`` negates it) and ``\\``
escapes the next character. A malformed pattern matches nothing.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable, Mapping
from typing import TypeVar

V = TypeVar("V")


class _BadPattern(ValueError):
    pass


def _class_char(pattern: str, pos: int) -> tuple[str, int]:
    if pos >= len(pattern):
        raise _BadPattern(pattern)
    char = pattern[pos]
    if char in "-]":
        raise _BadPattern(pattern)
    if char == "\\":
        pos += 1
        if pos >= len(pattern):
            raise _BadPattern(pattern)
        char = pattern[pos]
    return char, pos + 1


def _translate_class(pattern: str, pos: int) -> tuple[str, int]:
    negated = pos < len(pattern) and pattern[pos] == "^"
    if negated:
        pos += 1

    ranges: list[str] = []
    count = 0
    while True:
        if pos >= len(pattern):
            raise _BadPattern(pattern)
        if pattern[pos] == "]" and count > 0:
            pos += 1
            break
        lo, pos = _class_char(pattern, pos)
        hi = lo
        if pos < len(pattern) and pattern[pos] == "-":
            hi, pos = _class_char(pattern, pos + 1)
        count += 1
        if lo <= hi:
            ranges.append(re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}")

    body = "".join(ranges)
    if negated:
        return (f"[^{body}]" if body else "."), pos
    return (f"[{body}]" if body else "(?!)"), pos


@functools.lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str] | None:
    parts: list[str] = []
    pos = 0
    try:
        while pos < len(pattern):
            char = pattern[pos]
            pos += 1
            if char == "*":
                parts.append("[^/]*")
            elif char == "?":
                parts.append("[^/]")
            elif char == "[":
                part, pos = _translate_class(pattern, pos)
                parts.append(part)
            elif char == "\\":
                if pos >= len(pattern):
                    raise _BadPattern(pattern)
                parts.append(re.escape(pattern[pos]))
                pos += 1
            else:
                parts.append(re.escape(char))
    except _BadPattern:
        return None
    return re.compile("".join(parts), re.DOTALL)


def glob_match(pattern: str, name: str) -> bool:
    """Return True if *name* matches the glob *pattern* (case-sensitive)."""
    compiled = _compile(pattern)
    return compiled is not None and compiled.fullmatch(name) is not None


def matches(candidate: str, patterns: Iterable[str]) -> bool:
    """Return True if *candidate* matches any of *patterns*, ignoring case.

    An empty pattern list means no restriction and always matches.
    """
    pattern_list = list(patterns)
    if not pattern_list:
        return True
    name = candidate.lower()
    return any(glob_match(pattern.lower(), name) for pattern in pattern_list)


def lookup(mapping: Mapping[str, V], name: str) -> V | None:
    """Look up *name* in *mapping*, ignoring case.

    An exact match wins; otherwise the first key (in mapping order) that
    equals *name* case-insensitively is used.
    """
    if name in mapping:
        return mapping[name]
    folded = name.casefold()
    for key, value in mapping.items():
        if key.casefold() == folded:
            return value
    return None


def split_patterns(value: str) -> list[str]:
    """Split a comma-separated filter value into patterns.

    Whitespace around entries is ignored. Only an empty value yields an
    empty list (no filter); a value made of blanks or commas keeps its empty
    entries, which match no real name.
    """
    if value == "":
        return []
    return [part.strip() for part in value.split(",")]
