"""Greedy line wrapping over the collector's serialized paragraph text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence, Union

from .whitespace import HARD_BREAK_BACKSLASH, HARD_BREAK_SPACES, unprotect

__all__ = ["Word", "HardBreak", "Token", "tokenize", "wrap", "starts_block"]

_SPACE_RUN = re.compile(" +")

# Words that would open a block construct when they begin a line: bullet and
# ordered list markers, ATX headings, block quotes, fences, setext underlines,
# thematic breaks and HTML blocks.
_BLOCK_START = re.compile(r"(?:[-+]|\*+|_+|#{1,6}|\d{1,9}[.)]|=+|-+|>.*|`{3,}.*|~{3,}.*|<.*)\Z")


@dataclass(slots=True, frozen=True)
class Word:
    """Ordinary wrappable word; may contain protected whitespace."""

    text: str


@dataclass(slots=True, frozen=True)
class HardBreak:
    """Explicit line break that must be re-emitted with its original spelling."""

    backslash: bool

    @property
    def spelling(self) -> str:
        return "\\\n" if self.backslash else "  \n"


Token = Union[Word, HardBreak]


def tokenize(text: str) -> tuple[Token, ...]:
    """Split ``text`` on runs of spaces into tagged tokens."""

    tokens: list[Token] = []
    for piece in _SPACE_RUN.split(text):
        if not piece:
            continue
        if piece == HARD_BREAK_SPACES:
            tokens.append(HardBreak(backslash=False))
        elif piece == HARD_BREAK_BACKSLASH:
            tokens.append(HardBreak(backslash=True))
        else:
            tokens.append(Word(piece))
    return tuple(tokens)


def starts_block(word: str) -> bool:
    """Return ``True`` if ``word`` at the start of a line would open a new block."""

    return _BLOCK_START.match(word) is not None


def wrap(text: str, width: int, indent: int) -> str:
    """Merge runs of spaces and wrap ``text`` to lines of at most ``width`` columns.

    ``indent`` counts the columns already occupied on the first line (list
    markers and the like); continuation lines are prefixed with that many
    spaces. Words are never split, so a word longer than the available width
    sits alone on its line.
    """

    pad = " " * indent
    output: list[str] = []
    words: list[str] = []
    prefix = ""
    line_length = indent

    for token in tokenize(text):
        if isinstance(token, HardBreak):
            line = prefix + " ".join(words) if words else ""
            output.append(line + token.spelling)
            words = []
            # the next line starts at the continuation indent, not column 0
            prefix = pad
            line_length = indent
            continue

        word = token.text
        if words and line_length + 1 + len(word) > width:
            split = _wrap_point(words, word)
            if split is not None:
                output.append(prefix + " ".join(words[:split]) + "\n")
                words = words[split:]
                prefix = pad
                line_length = indent + sum(len(item) + 1 for item in words)
                words.append(word)
                line_length += len(word)
                continue

        if words:
            line_length += 1
        words.append(word)
        line_length += len(word)

    if words:
        output.append(prefix + " ".join(words))
    return unprotect("".join(output))


def _wrap_point(words: Sequence[str], word: str) -> int | None:
    """Return the index in ``words`` where the next line should begin.

    ``len(words)`` means only ``word`` moves down. When ``word`` would start a
    block construct, the preceding ordinary word is carried along with it; if
    there is none to carry, ``None`` keeps ``word`` on the current line.
    """

    if not starts_block(word):
        return len(words)
    for index in range(len(words) - 1, 0, -1):
        if not starts_block(words[index]):
            return index
    return None
