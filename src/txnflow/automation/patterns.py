"""Glob-style patterns used by automation rule conditions.

Supported syntax:
    *       any run of characters (including none)
    ?       exactly one character

Everything else matches literally, brackets included, so "[PENDING]*"
only matches text that contains "[PENDING]". Matching is case-insensitive
and unanchored, so "NETFLIX*" matches "PAYPAL *NETFLIX.COM" as well.
"""

import re
from functools import lru_cache


class InvalidPatternError(ValueError):
    """Raised when a glob pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")


def glob_to_regex(pattern: str) -> str:
    """Translate a glob pattern into an (unanchored) regular expression."""
    parts: list[str] = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a glob pattern (cached).

    Raises:
        InvalidPatternError: If the pattern is malformed
    """
    try:
        return re.compile(glob_to_regex(pattern), re.IGNORECASE | re.DOTALL)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e)) from e


def matches(text: str | None, pattern: str) -> bool:
    """Case-insensitive, unanchored glob search of `pattern` in `text`.

    Raises:
        InvalidPatternError: If the pattern is malformed
    """
    return compile_glob(pattern).search(text or "") is not None
