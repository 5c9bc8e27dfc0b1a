"""Find paragraphs in a document tree and compute their reflowed text."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .collector import collect
from .errors import ParagraphRangeError
from .tree import DocumentTree, Node, NodeKind
from .whitespace import contains_reserved
from .wrapper import wrap

__all__ = ["FormattedParagraph", "compute_indent", "format_paragraph", "locate_and_format"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FormattedParagraph:
    """A paragraph whose reflowed text differs from its source."""

    node: Node
    text: str


def compute_indent(tree: DocumentTree, paragraph: Node) -> int:
    """Return the continuation indent for ``paragraph``.

    Paragraphs inside list items are indented to the column their first line
    starts at, which covers the list marker and its trailing spacing.
    """

    parent = tree.parent_of(paragraph)
    if parent is not None and parent.kind is NodeKind.LIST_ITEM:
        return paragraph.start - tree.line_start(paragraph.start)
    return 0


def format_paragraph(tree: DocumentTree, paragraph: Node, width: int, indent: int) -> str:
    """Collect and wrap the text of a single paragraph."""

    return wrap(collect(tree, paragraph), width, indent)


def locate_and_format(tree: DocumentTree | None, width: int) -> list[FormattedParagraph]:
    """Return records for every paragraph whose wrapped text differs, in document order."""

    if tree is None:
        return []
    records: list[FormattedParagraph] = []
    _visit(tree, tree.root, width, records)
    LOGGER.debug("Located %d paragraph(s) needing reflow at width %d", len(records), width)
    return records


def _visit(tree: DocumentTree, node: Node, width: int, records: list[FormattedParagraph]) -> None:
    if node.kind is NodeKind.PARAGRAPH:
        record = _format_if_changed(tree, node, width)
        if record is not None:
            records.append(record)
        return
    for child in tree.children_of(node):
        _visit(tree, child, width, records)


def _format_if_changed(tree: DocumentTree, paragraph: Node, width: int) -> FormattedParagraph | None:
    _check_range(tree, paragraph)
    original = tree.raw(paragraph)
    if contains_reserved(original):
        LOGGER.debug("Skipping paragraph at offset %d: contains reserved marker characters", paragraph.start)
        return None

    indent = compute_indent(tree, paragraph)
    text = format_paragraph(tree, paragraph, width, indent)
    if original.endswith("\n"):
        original = original[:-1]
    if text == original:
        return None
    return FormattedParagraph(node=paragraph, text=text)


def _check_range(tree: DocumentTree, paragraph: Node) -> None:
    if paragraph.start < 0 or paragraph.end < paragraph.start or paragraph.end > len(tree.source):
        raise ParagraphRangeError(
            f"Paragraph range ({paragraph.start}, {paragraph.end}) is outside the document",
            reason="invalid_range",
            start=paragraph.start,
            end=paragraph.end,
            length=len(tree.source),
        )
