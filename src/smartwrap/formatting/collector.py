"""Serialize a paragraph's inline nodes into one wrappable line."""

from __future__ import annotations

from .tree import DocumentTree, Node, NodeKind
from .whitespace import HARD_BREAK_BACKSLASH, HARD_BREAK_SPACES, protect

__all__ = ["collect"]

_FLATTEN_TABLE = str.maketrans({"\t": " ", "\n": " "})


def collect(tree: DocumentTree, paragraph: Node) -> str:
    """Collect the formattable text of ``paragraph``.

    Replaces:
      - tabs and newlines inside text runs with spaces
      - soft line breaks with a space
      - hard line breaks with a reserved marker token
      - spaces and tabs of verbatim nodes (links, images, inline HTML) with
        protection markers

    Delimiters of emphasis, strikethrough and code spans are echoed as literal
    characters so they stay glued to the words they enclose.
    """

    parts: list[str] = []
    _collect_children(tree, paragraph, parts)
    return "".join(parts)


def _collect_children(tree: DocumentTree, node: Node, parts: list[str]) -> None:
    for child in tree.children_of(node):
        kind = child.kind
        if kind is NodeKind.TEXT:
            parts.append(tree.raw(child).translate(_FLATTEN_TABLE))
        elif kind is NodeKind.DELIMITED:
            parts.append(child.opening_marker)
            _collect_children(tree, child, parts)
            parts.append(child.closing_marker)
        elif kind is NodeKind.SOFT_BREAK:
            parts.append(" ")
        elif kind is NodeKind.HARD_BREAK:
            marker = HARD_BREAK_BACKSLASH if child.backslash else HARD_BREAK_SPACES
            parts.append(f" {marker} ")
        else:
            # text that must not be wrapped or reformatted
            parts.append(protect(tree.raw(child)))
