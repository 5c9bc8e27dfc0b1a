"""Turn formatted paragraphs into one compound edit against a text buffer."""

from __future__ import annotations

import logging
from typing import ContextManager, Protocol, Sequence

from ..editor.patches import PatchApplyError, RangePatch
from .errors import ParagraphRangeError
from .locator import FormattedParagraph

__all__ = ["ChangeRecorder", "TextBuffer", "build_edits", "apply"]

LOGGER = logging.getLogger(__name__)


class ChangeRecorder(Protocol):
    """Handle yielded by :meth:`TextBuffer.compound_change`."""

    def replace_text(self, start: int, end: int, text: str) -> None:
        ...


class TextBuffer(Protocol):
    """Mutable text surface the formatter writes into."""

    @property
    def text(self) -> str:
        ...

    def line_start(self, offset: int) -> int:
        ...

    def compound_change(self) -> ContextManager[ChangeRecorder]:
        ...

    def set_selection(self, start: int, end: int) -> None:
        ...


def build_edits(text: str, records: Sequence[FormattedParagraph]) -> tuple[RangePatch, ...]:
    """Return range patches for ``records``, last paragraph first.

    The trailing line terminator of each paragraph stays in the buffer since
    the formatted text never carries one.
    """

    edits: list[RangePatch] = []
    for record in sorted(records, key=lambda item: item.node.start, reverse=True):
        start = record.node.start
        end = record.node.end
        if start < 0 or end < start or end > len(text):
            raise ParagraphRangeError(
                f"Paragraph range ({start}, {end}) does not fit a buffer of {len(text)} characters",
                reason="invalid_range",
                start=start,
                end=end,
                length=len(text),
            )
        if text.endswith("\n", start, end):
            end -= 1
        if edits and end > edits[-1].start:
            raise ParagraphRangeError(
                "Formatted paragraphs overlap",
                reason="range_overlap",
                start=start,
                end=end,
            )
        edits.append(RangePatch(start=start, end=end, replacement=record.text, match_text=text[start:end]))
    return tuple(edits)


def apply(buffer: TextBuffer, records: Sequence[FormattedParagraph]) -> tuple[RangePatch, ...]:
    """Replace every formatted paragraph in ``buffer`` as one atomic change.

    The caret is moved to the start of the buffer afterwards.
    """

    edits: tuple[RangePatch, ...] = ()
    if records:
        edits = build_edits(buffer.text, records)
        try:
            with buffer.compound_change() as change:
                for edit in edits:
                    change.replace_text(edit.start, edit.end, edit.replacement)
        except PatchApplyError as exc:
            raise ParagraphRangeError(str(exc), reason=exc.reason, expected=exc.expected, actual=exc.actual) from exc
        LOGGER.debug("Applied %d paragraph edit(s) as one compound change", len(edits))
    buffer.set_selection(0, 0)
    return edits
