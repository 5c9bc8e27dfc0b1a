"""Reserved marker characters and whitespace protection for verbatim spans."""

from __future__ import annotations

__all__ = [
    "PROTECTED_SPACE",
    "PROTECTED_TAB",
    "HARD_BREAK_SPACES",
    "HARD_BREAK_BACKSLASH",
    "RESERVED_MARKERS",
    "protect",
    "unprotect",
    "contains_reserved",
]

PROTECTED_SPACE = "\x01"
PROTECTED_TAB = "\x02"
HARD_BREAK_SPACES = "\x03"
HARD_BREAK_BACKSLASH = "\x04"
RESERVED_MARKERS = frozenset({PROTECTED_SPACE, PROTECTED_TAB, HARD_BREAK_SPACES, HARD_BREAK_BACKSLASH})

_PROTECT_TABLE = str.maketrans({" ": PROTECTED_SPACE, "\t": PROTECTED_TAB})
_UNPROTECT_TABLE = str.maketrans({PROTECTED_SPACE: " ", PROTECTED_TAB: "\t"})


def protect(text: str) -> str:
    """Hide spaces and tabs in ``text`` so the wrapper never breaks on them."""

    return text.translate(_PROTECT_TABLE)


def unprotect(text: str) -> str:
    """Inverse of :func:`protect`."""

    return text.translate(_UNPROTECT_TABLE)


def contains_reserved(text: str) -> bool:
    """Return ``True`` when ``text`` already holds one of the reserved markers."""

    return any(marker in text for marker in RESERVED_MARKERS)
