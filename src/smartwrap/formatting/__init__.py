"""Paragraph reflow engine: collect, wrap, locate and apply."""

from .applier import TextBuffer, apply, build_edits
from .collector import collect
from .errors import DocumentTooLargeError, FormatError, ParagraphRangeError
from .locator import FormattedParagraph, compute_indent, format_paragraph, locate_and_format
from .tree import DocumentTree, Node, NodeKind
from .whitespace import contains_reserved, protect, unprotect
from .wrapper import HardBreak, Token, Word, tokenize, wrap

__all__ = [
    "DocumentTooLargeError",
    "DocumentTree",
    "FormatError",
    "FormattedParagraph",
    "HardBreak",
    "Node",
    "NodeKind",
    "ParagraphRangeError",
    "TextBuffer",
    "Token",
    "Word",
    "apply",
    "build_edits",
    "collect",
    "compute_indent",
    "contains_reserved",
    "format_paragraph",
    "locate_and_format",
    "protect",
    "tokenize",
    "unprotect",
    "wrap",
]
