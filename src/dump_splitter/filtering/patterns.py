"""Glob-style table name matching.

Only ``*`` (any sequence, including empty) and ``?`` (exactly one character)
are wildcards. Every other character, ``[`` and ``]`` included, is literal and
compared case-sensitively, so this is stricter than :func:`fnmatch.fnmatch`.
"""

import re
from functools import lru_cache
from typing import Pattern


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> Pattern[str]:
    """Translate a glob pattern into an anchored regular expression.

    Example:
        >>> compile_pattern("cache_*").fullmatch("cache_items") is not None
        True
    """
    parts = []
    for char in pattern:
        if char == "*":
            # Collapse runs of '*'
            if not parts or parts[-1] != ".*":
                parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def matches(name: str, pattern: str) -> bool:
    """Return True if the whole table name matches the glob pattern.

    Examples:
        >>> matches("abcd", "ab*")
        True
        >>> matches("xabcd", "ab*")
        False
        >>> matches("users", "user?")
        True
    """
    return compile_pattern(pattern).fullmatch(name) is not None
