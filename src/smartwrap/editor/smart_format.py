"""Smart Markdown paragraph formatting for a text buffer."""

from __future__ import annotations

import logging
from typing import Callable

from ..formatting.applier import TextBuffer, apply
from ..formatting.errors import DocumentTooLargeError, ParagraphRangeError
from ..formatting.locator import FormattedParagraph, locate_and_format
from ..formatting.tree import DocumentTree
from ..services.settings import Settings
from .document_model import DocumentState
from .syntax.markdown import parse_document
from .text_buffer import EditorBuffer

__all__ = ["SmartFormat", "TreeProvider", "format_markdown"]

LOGGER = logging.getLogger(__name__)

TreeProvider = Callable[[str], "DocumentTree | None"]


class SmartFormat:
    """Rewraps every paragraph of a buffer in one undoable edit."""

    def __init__(
        self,
        buffer: TextBuffer,
        settings: Settings | None = None,
        *,
        tree_provider: TreeProvider = parse_document,
    ) -> None:
        self._buffer = buffer
        self._settings = settings or Settings()
        self._tree_provider = tree_provider

    @property
    def settings(self) -> Settings:
        return self._settings

    def format(self) -> list[FormattedParagraph]:
        """Reflow the buffer and return the paragraphs that were rewritten.

        A missing tree means there is nothing to format. The caret ends up at
        the start of the buffer whenever a tree was available.
        """

        text = self._buffer.text
        limit = self._settings.max_document_chars
        if limit and len(text) > limit:
            raise DocumentTooLargeError(len(text), limit)

        tree = self._tree_provider(text)
        if tree is None:
            return []
        if tree.source != text:
            raise ParagraphRangeError(
                "Document tree does not match the buffer contents",
                reason="stale_tree",
                tree_length=len(tree.source),
                buffer_length=len(text),
            )

        records = locate_and_format(tree, self._settings.wrap_width)
        apply(self._buffer, records)
        if records:
            LOGGER.debug("Reformatted %d paragraph(s)", len(records))
        return records


def format_markdown(text: str, settings: Settings | None = None) -> str:
    """Return ``text`` with every paragraph reflowed."""

    buffer = EditorBuffer(DocumentState(text=text))
    SmartFormat(buffer, settings).format()
    return buffer.text
